import logging
import numpy as np
from math import copysign, exp, inf, isfinite, sqrt

from .binomial import _check_lattice_config
from .config import DEFAULT_BUMP, DEFAULT_TREE_STEPS
from .core import AMERICAN, EUROPEAN, OptionParams, OptionSpec, PriceOutputs
from .engine import PricingEngine, require_option_spec
from .risk import spot_greeks

logger = logging.getLogger(__name__)

SQRT3 = sqrt(3.0)


def branch_probabilities(r: float, q: float, sigma: float, dt: float) -> tuple[float, float, float]:
    """Up / middle / down probabilities for a ``sqrt(3 dt)``-spaced tree.

    Matches the first two moments of the log-return.  Negative values are
    clamped to zero and the triple renormalised; if nothing is left the
    split falls back to ``(0.25, 0.5, 0.25)``.  A drift shift too large to
    represent puts all the weight on the branch in the direction of the drift.
    """
    a = r - q - 0.5 * sigma * sigma
    scale = 2.0 * sigma * SQRT3
    if a == 0.0:
        shift = 0.0
    elif scale > 0.0:
        shift = a * sqrt(dt) / scale
    else:
        shift = copysign(inf, a)
    if not isfinite(shift):
        logger.debug("trinomial drift shift overflowed, all weight on one branch")
        return (1.0, 0.0, 0.0) if shift > 0 else (0.0, 0.0, 1.0)

    pu = 1.0 / 6.0 + shift
    pd = 1.0 / 6.0 - shift
    pm = 1.0 - pu - pd

    pu, pm, pd = max(0.0, pu), max(0.0, pm), max(0.0, pd)
    total = pu + pm + pd
    if total == 0.0:
        logger.debug("trinomial probabilities vanished, using (0.25, 0.5, 0.25)")
        return 0.25, 0.5, 0.25
    return pu / total, pm / total, pd / total


class TrinomialTreeEngine(PricingEngine):
    """Recombining trinomial tree for European and American vanilla options.

    Parameters
    ----------
    steps : int
        Number of time steps ``N``; the terminal layer has ``2N+1`` nodes.
    bump : float
        Log-spot shock for finite-difference delta / gamma.
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

    def value_from_tree(self, spec: OptionSpec, params: OptionParams, spot: float) -> float:
        """Root value of the tree started at ``spot``."""
        N = self._steps
        if N == 0 or params.degenerate:
            return float(spec.payoff(spot))

        dt = params.T / N
        dx = params.sigma * sqrt(3.0 * dt)     # log-spacing, u = exp(dx)
        if exp(dx) <= 1.0:
            logger.debug("flat tree (dx=%r), returning intrinsic", dx)
            return float(spec.payoff(spot))
        disc = exp(-params.r * dt)
        pu, pm, pd = branch_probabilities(params.r, params.q, params.sigma, dt)

        # V[i] holds node j = i - n at the current layer (j in [-n, n])
        j = np.arange(-N, N + 1)
        V = spec.payoff(spot * np.exp(dx * j))

        american = spec.is_american
        for n in range(N, 0, -1):
            V = disc * (pu * V[2:] + pm * V[1:-1] + pd * V[:-2])
            if american:
                j_n = np.arange(-(n - 1), n)
                V = np.maximum(V, spec.payoff(spot * np.exp(dx * j_n)))

        return float(V[0])

    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        require_option_spec(spec, "Trinomial engine")
        if spec.is_american:
            return self._price_american(spec, params)
        return self._price_european(spec, params)

    def _price_european(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        if self._steps == 0:
            raise ValueError("Trinomial engine requires at least one step")
        return self._price_style(spec.with_exercise(EUROPEAN), params)

    def _price_american(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        if self._steps == 0:
            raise ValueError("Trinomial engine requires at least one step")
        return self._price_style(spec.with_exercise(AMERICAN), params)

    def _price_style(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        logger.debug("trinomial %s %s, N=%d", spec.exercise, spec.payoff.kind, self._steps)
        base = self.value_from_tree(spec, params, params.S)
        delta, gamma = spot_greeks(
            lambda s: self.value_from_tree(spec, params, s),
            params.S, base, log_bump=self._bump,
        )
        return PriceOutputs(value=base, delta=delta, gamma=gamma)
