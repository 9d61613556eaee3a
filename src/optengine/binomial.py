import logging
import numpy as np
from math import exp, sqrt

from .config import DEFAULT_BUMP, DEFAULT_TREE_STEPS
from .core import AMERICAN, EUROPEAN, OptionParams, OptionSpec, PriceOutputs
from .engine import PricingEngine, require_option_spec
from .risk import spot_greeks

logger = logging.getLogger(__name__)


def _check_lattice_config(steps: int, bump: float) -> None:
    if steps < 0:
        raise ValueError(f"steps must be non-negative, got {steps}")
    if bump < 0:
        raise ValueError(f"bump must be non-negative, got {bump}")


class BinomialCRREngine(PricingEngine):
    """Cox-Ross-Rubinstein tree for European and American vanilla options.

    Parameters
    ----------
    steps : int
        Number of time steps ``N``.  Zero is accepted here but rejected by
        ``price``.
    bump : float
        Log-spot shock for finite-difference delta / gamma.  Zero disables
        the Greeks.
    """

    def __init__(self, steps: int = DEFAULT_TREE_STEPS, bump: float = DEFAULT_BUMP):
        _check_lattice_config(steps, bump)
        self._steps = int(steps)
        self._bump = float(bump)

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def bump(self) -> float:
        return self._bump

    def config(self) -> dict:
        return {"steps": self._steps, "bump": self._bump}

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------
    def value_from_tree(self, spec: OptionSpec, params: OptionParams, spot: float) -> float:
        """Root value of the tree started at ``spot``."""
        N = self._steps
        if N == 0 or params.degenerate:
            return float(spec.payoff(spot))

        dt = params.T / N
        sig_sqrt_dt = params.sigma * sqrt(dt)
        u  = exp(sig_sqrt_dt)
        d  = 1.0 / u
        if u <= d:
            # sigma*sqrt(dt) underflowed; every node sits at spot
            logger.debug("flat tree (u=%r), returning intrinsic", u)
            return float(spec.payoff(spot))
        disc = exp(-params.r * dt)
        p = (exp((params.r - params.q) * dt) - d) / (u - d)
        if not (0.0 <= p <= 1.0):
            logger.debug("clamping risk-neutral probability p=%.6g into [0, 1]", p)
            p = min(max(p, 0.0), 1.0)

        # Payoff at maturity; node j has j up-moves
        j = np.arange(N + 1)
        ST = spot * np.exp(sig_sqrt_dt * (2 * j - N))
        V = spec.payoff(ST)

        american = spec.is_american
        for k in range(N - 1, -1, -1):
            V = disc * (p * V[1:] + (1.0 - p) * V[:-1])
            if american:
                S_k = spot * np.exp(sig_sqrt_dt * (2 * j[:k + 1] - k))
                V = np.maximum(V, spec.payoff(S_k))

        return float(V[0])

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------
    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        require_option_spec(spec, "Binomial engine")
        if spec.is_american:
            return self._price_american(spec, params)
        return self._price_european(spec, params)

    def _price_european(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        if self._steps == 0:
            raise ValueError("Binomial engine requires at least one step")
        return self._price_style(spec.with_exercise(EUROPEAN), params)

    def _price_american(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        if self._steps == 0:
            raise ValueError("Binomial engine requires at least one step")
        return self._price_style(spec.with_exercise(AMERICAN), params)

    def _price_style(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        logger.debug("binomial %s %s, N=%d", spec.exercise, spec.payoff.kind, self._steps)
        base = self.value_from_tree(spec, params, params.S)
        delta, gamma = spot_greeks(
            lambda s: self.value_from_tree(spec, params, s),
            params.S, base, log_bump=self._bump,
        )
        return PriceOutputs(value=base, delta=delta, gamma=gamma)
