"""Longstaff-Schwartz Monte Carlo for American vanilla options.

Continuation values are estimated by regressing discounted future cash
flows on a Laguerre polynomial basis of the rescaled spot, cross-sectionally
over the in-the-money paths at each exercise date.  The normal equations
are solved with Gauss-Jordan elimination and partial pivoting; a singular
system falls back to the sample mean instead of failing.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .config import (
    DEFAULT_LSMC_DEGREE,
    DEFAULT_LSMC_PATHS,
    DEFAULT_LSMC_STEPS,
    DEFAULT_SEED,
    PIVOT_TOLERANCE,
    SCALE_TOLERANCE,
)
from .core import AMERICAN, OptionParams, OptionSpec, PriceOutputs
from .engine import require_exercise
from .monte_carlo import MonteCarloEngine
from .processes import VarianceReduction

logger = logging.getLogger(__name__)

__all__ = [
    "laguerre_basis",
    "solve_normal_equations",
    "regress_continuation",
    "evaluate_continuation",
    "AmericanLSMCEngine",
]


# ---------------------------------------------------------------------------
# Regression primitives
# ---------------------------------------------------------------------------

def laguerre_basis(x, degree: int) -> np.ndarray:
    """Laguerre polynomials ``L_0 .. L_degree`` evaluated at ``x``.

    Uses the three-term recurrence::

        L_0 = 1,  L_1 = 1 - x
        L_n = ((2n - 1 - x) L_{n-1} - (n - 1) L_{n-2}) / n

    Parameters
    ----------
    x : float or array, shape (n,)
        Evaluation points.
    degree : int
        Highest polynomial order; negative values are treated as 0.

    Returns
    -------
    ndarray, shape (n, degree+1)
        Design matrix, one row per point.
    """
    x = np.atleast_1d(np.asarray(x, dtype=float))
    deg = max(0, int(degree))
    B = np.empty((x.size, deg + 1))
    B[:, 0] = 1.0
    if deg >= 1:
        B[:, 1] = 1.0 - x
    for n in range(2, deg + 1):
        B[:, n] = ((2.0 * n - 1.0 - x) * B[:, n - 1] - (n - 1.0) * B[:, n - 2]) / n
    return B


def solve_normal_equations(
    ata: np.ndarray, atb: np.ndarray, *, tol: float = PIVOT_TOLERANCE
) -> Optional[np.ndarray]:
    """Solve ``ata @ beta = atb`` by Gauss-Jordan with partial pivoting.

    Returns ``None`` when a pivot's magnitude drops below ``tol``.
    The inputs are not modified.
    """
    A = np.array(ata, dtype=float)
    b = np.array(atb, dtype=float)
    n = b.size
    for col in range(n):
        pivot = col + int(np.argmax(np.abs(A[col:, col])))
        if abs(A[pivot, col]) < tol:
            return None
        if pivot != col:
            A[[col, pivot]] = A[[pivot, col]]
            b[[col, pivot]] = b[[pivot, col]]

        inv_pivot = 1.0 / A[col, col]
        A[col, col:] *= inv_pivot
        b[col] *= inv_pivot

        factors = A[:, col].copy()
        factors[col] = 0.0
        A[:, col:] -= np.outer(factors, A[col, col:])
        b -= factors * b[col]
    return b


def _scaled(spots, scale: float) -> np.ndarray:
    inv_scale = 1.0 / scale if scale > SCALE_TOLERANCE else 1.0
    return np.maximum(np.asarray(spots, dtype=float), 0.0) * inv_scale


def regress_continuation(
    spots: np.ndarray, discounted_cf: np.ndarray, degree: int, scale: float
) -> np.ndarray:
    """Least-squares coefficients of ``discounted_cf`` on the Laguerre basis.

    A singular normal matrix yields ``[mean(discounted_cf), 0, ..., 0]``.
    """
    cols = max(0, int(degree)) + 1
    spots = np.asarray(spots, dtype=float)
    y = np.asarray(discounted_cf, dtype=float)
    if spots.size == 0:
        return np.zeros(cols)

    B = laguerre_basis(_scaled(spots, scale), degree)
    beta = solve_normal_equations(B.T @ B, B.T @ y)
    if beta is None:
        logger.debug("singular regression on %d paths, using sample mean", spots.size)
        beta = np.zeros(cols)
        beta[0] = float(y.mean())
    return beta


def evaluate_continuation(
    spots, coefficients: np.ndarray, degree: int, scale: float
) -> np.ndarray:
    """Fitted continuation value at ``spots``."""
    coefficients = np.asarray(coefficients, dtype=float)
    if coefficients.size == 0:
        return np.zeros(np.atleast_1d(spots).shape)
    B = laguerre_basis(_scaled(spots, scale), degree)
    k = min(coefficients.size, B.shape[1])
    return B[:, :k] @ coefficients[:k]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class AmericanLSMCEngine(MonteCarloEngine):
    """American vanilla options by Longstaff-Schwartz regression.

    Parameters
    ----------
    paths : int
        Number of simulated paths.
    time_steps : int
        Number of exercise dates (at least one is used).
    seed : int
        Seed of the per-call ``numpy.random.default_rng``.
    degree : int
        Highest Laguerre polynomial order in the regression basis.
    variance_reduction : str
        One of the ``VarianceReduction`` labels.
    """

    def __init__(
        self,
        paths: int = DEFAULT_LSMC_PATHS,
        time_steps: int = DEFAULT_LSMC_STEPS,
        seed: int = DEFAULT_SEED,
        degree: int = DEFAULT_LSMC_DEGREE,
        variance_reduction: str = VarianceReduction.NONE,
    ):
        super().__init__(paths, time_steps, seed, variance_reduction)
        if degree < 0:
            raise ValueError(f"degree must be non-negative, got {degree}")
        self._degree = int(degree)

    @property
    def degree(self) -> int:
        return self._degree

    def config(self) -> dict:
        return {**super().config(), "degree": self._degree}

    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        require_exercise(spec, AMERICAN, "LSMC engine")

        payoff = spec.payoff
        if params.degenerate:
            logger.debug("degenerate inputs T=%s sigma=%s, returning intrinsic",
                         params.T, params.sigma)
            return PriceOutputs(value=payoff(params.S))

        logger.debug("LSMC %s", self.config())
        S = self.generate_paths(params)
        n_steps = S.shape[0] - 1
        disc = math.exp(-params.r * params.T / n_steps)
        scale = params.K if params.K > SCALE_TOLERANCE else max(params.S, 1.0)

        cashflows = np.array(payoff(S[-1, :]), dtype=float)

        for t in range(n_steps - 1, 0, -1):
            cashflows *= disc
            spots = S[t, :]
            exercise = payoff(spots)
            itm = exercise > 0.0
            if not np.any(itm):
                continue

            coeffs = regress_continuation(spots[itm], cashflows[itm], self._degree, scale)
            continuation = evaluate_continuation(spots[itm], coeffs, self._degree, scale)

            idx = np.flatnonzero(itm)[exercise[itm] > continuation]
            cashflows[idx] = exercise[idx]

        # first exercise date -> t=0
        cashflows *= disc

        intrinsic_now = payoff(params.S)
        if intrinsic_now > 0.0:
            cashflows = np.maximum(cashflows, intrinsic_now)

        return self.summarize(self.apply_variance_reduction(cashflows))
