# optengine/monte_carlo.py

from __future__ import annotations
import logging
import math
import numpy as np

from .config import DEFAULT_MC_PATHS, DEFAULT_MC_STEPS, DEFAULT_SEED
from .core import EUROPEAN, OptionParams, OptionSpec, PriceOutputs
from .engine import PricingEngine, require_exercise
from .processes import (
    VARIANCE_REDUCTION_MODES,
    VarianceReduction,
    gbm_paths,
    reduce_antithetic_pairs,
    uses_antithetic,
)
from . import stats

logger = logging.getLogger(__name__)


class MonteCarloEngine(PricingEngine):
    """Shared base for the Monte-Carlo engines.

    Owns path count, time grid, seed and variance-reduction mode, and
    provides path generation plus the payoff-agnostic post-reduction step.
    Each call to ``generate_paths`` starts a fresh ``default_rng(seed)``
    (PCG64), so equal seeds give bit-identical samples and repeated calls
    on one engine are reproducible.
    """

    def __init__(
        self,
        paths: int = DEFAULT_MC_PATHS,
        time_steps: int = DEFAULT_MC_STEPS,
        seed: int = DEFAULT_SEED,
        variance_reduction: str = VarianceReduction.NONE,
    ):
        if paths < 0:
            raise ValueError(f"paths must be non-negative, got {paths}")
        if time_steps < 0:
            raise ValueError(f"time_steps must be non-negative, got {time_steps}")
        if variance_reduction not in VARIANCE_REDUCTION_MODES:
            raise ValueError(
                f"variance_reduction must be one of {VARIANCE_REDUCTION_MODES}, "
                f"got {variance_reduction!r}"
            )
        self._paths = int(paths)
        self._time_steps = int(time_steps)
        self._seed = seed
        self._variance_reduction = variance_reduction

    @property
    def paths(self) -> int:
        return self._paths

    @property
    def time_steps(self) -> int:
        return self._time_steps

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def variance_reduction(self) -> str:
        return self._variance_reduction

    def config(self) -> dict:
        return {
            "paths": self._paths,
            "time_steps": self._time_steps,
            "seed": self._seed,
            "variance_reduction": self._variance_reduction,
        }

    # ------------------------------------------------------------------
    # Shared machinery
    # ------------------------------------------------------------------
    def generate_paths(self, params: OptionParams) -> np.ndarray:
        """GBM paths, shape ``(max(1, time_steps) + 1, paths)``."""
        return gbm_paths(
            params.S, params.r, params.q, params.sigma, params.T,
            max(1, self._time_steps), self._paths,
            variance_reduction=self._variance_reduction,
            rng=np.random.default_rng(self._seed),
        )

    def apply_variance_reduction(self, discounted: np.ndarray) -> np.ndarray:
        """Collapse antithetic pairs into their mean; otherwise a no-op."""
        discounted = np.asarray(discounted, dtype=float)
        if not uses_antithetic(self._variance_reduction) or discounted.size < 2:
            return discounted
        return reduce_antithetic_pairs(discounted)

    @staticmethod
    def summarize(sample: np.ndarray) -> PriceOutputs:
        return PriceOutputs(
            value=stats.mean(sample),
            std_dev=stats.standard_deviation(sample),
            std_error=stats.standard_error(sample),
        )


class EuropeanMonteCarloEngine(MonteCarloEngine):
    """Terminal-payoff Monte Carlo for European vanilla options."""

    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        require_exercise(spec, EUROPEAN, "European Monte Carlo engine")

        if params.degenerate:
            logger.debug("degenerate inputs T=%s sigma=%s, returning discounted intrinsic",
                         params.T, params.sigma)
            disc = math.exp(-params.r * max(params.T, 0.0))
            return PriceOutputs(value=disc * spec.payoff(params.S))

        logger.debug("European MC %s", self.config())
        ST = self.generate_paths(params)[-1, :]
        X = math.exp(-params.r * params.T) * spec.payoff(ST)
        return self.summarize(self.apply_variance_reduction(X))
