# exotics.py
# Path-dependent exotic option pricing via Monte Carlo.
#
# Payoff functions take paths of shape ``(n_steps+1, n_paths)`` including
# the t=0 row and return one undiscounted payoff per path, so the
# stochastic process stays decoupled from the contract.

from __future__ import annotations
import logging
import math
import numpy as np

from .config import DEFAULT_EXOTIC_PATHS, DEFAULT_EXOTIC_STEPS, DEFAULT_SEED
from .core import (
    ASIAN, BARRIER, CALL, LOOKBACK,
    OptionParams, PathDependentOptionSpec, PriceOutputs, intrinsic,
)
from .monte_carlo import MonteCarloEngine
from .processes import VarianceReduction

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Asian options
# ---------------------------------------------------------------------------
def asian_payoff(paths: np.ndarray, K: float, kind: str) -> np.ndarray:
    """Fixed-strike arithmetic Asian.

    The average runs over every sampled spot, t=0 row included.
    """
    avg = paths.mean(axis=0)
    return intrinsic(avg, K, kind)


# ---------------------------------------------------------------------------
# Barrier options
# ---------------------------------------------------------------------------
def barrier_hit(paths: np.ndarray, barrier: float, up: bool) -> np.ndarray:
    """Discrete monitoring: touched if any sampled spot reaches the level."""
    if up:
        return np.any(paths >= barrier, axis=0)
    return np.any(paths <= barrier, axis=0)


def barrier_payoff(
    paths: np.ndarray, K: float, kind: str, barrier: float, barrier_type: str
) -> np.ndarray:
    """Knock-in pays the terminal vanilla only if hit, knock-out only if not."""
    hit = barrier_hit(paths, barrier, barrier_type.startswith("up"))
    active = hit if barrier_type.endswith("in") else ~hit
    vanilla = intrinsic(paths[-1, :], K, kind)
    return np.where(active, vanilla, 0.0)


# ---------------------------------------------------------------------------
# Lookback options
# ---------------------------------------------------------------------------
def lookback_payoff(paths: np.ndarray, K: float, kind: str) -> np.ndarray:
    """Fixed-strike lookback.

    Call: ``max(S_max - K, 0)``; put: ``max(K - S_min, 0)``.
    """
    if kind == CALL:
        return intrinsic(paths.max(axis=0), K, kind)
    return intrinsic(paths.min(axis=0), K, kind)


def path_payoff(paths: np.ndarray, spec: PathDependentOptionSpec) -> np.ndarray:
    if spec.exotic_type == ASIAN:
        return asian_payoff(paths, spec.strike, spec.kind)
    if spec.exotic_type == BARRIER:
        return barrier_payoff(paths, spec.strike, spec.kind, spec.barrier, spec.barrier_type)
    if spec.exotic_type == LOOKBACK:
        return lookback_payoff(paths, spec.strike, spec.kind)
    raise ValueError(f"unsupported exotic_type {spec.exotic_type!r}")


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class PathDependentMonteCarloEngine(MonteCarloEngine):
    """Asian, barrier and lookback options over full simulated paths.

    Only ``PathDependentOptionSpec`` is accepted; this engine never prices
    vanilla ``OptionSpec`` contracts.
    """

    def __init__(
        self,
        paths: int = DEFAULT_EXOTIC_PATHS,
        time_steps: int = DEFAULT_EXOTIC_STEPS,
        seed: int = DEFAULT_SEED,
        variance_reduction: str = VarianceReduction.NONE,
    ):
        super().__init__(paths, time_steps, seed, variance_reduction)

    def price(self, spec: PathDependentOptionSpec, params: OptionParams) -> PriceOutputs:
        if not isinstance(spec, PathDependentOptionSpec):
            raise ValueError(
                "Path-dependent Monte Carlo engine requires a PathDependentOptionSpec, "
                f"got {type(spec).__name__}"
            )

        logger.debug("path-dependent MC %s on %s", self.config(), spec.exotic_type)
        paths = self.generate_paths(params)
        X = math.exp(-params.r * max(params.T, 0.0)) * path_payoff(paths, spec)
        return self.summarize(self.apply_variance_reduction(X))
