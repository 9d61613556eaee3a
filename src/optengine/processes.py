# processes.py
# GBM path generator for the Monte Carlo engines.
# Returns an array of shape (n_steps+1, n_paths) that includes the t=0 row
# with S0.  Antithetic pairs occupy adjacent columns (2k, 2k+1), so the
# post-processing step can collapse them without bookkeeping.

from __future__ import annotations
import numpy as np
from typing import Optional


__all__ = [
    "VarianceReduction",
    "VARIANCE_REDUCTION_MODES",
    "uses_antithetic",
    "uses_moment_matching",
    "moment_match",
    "gbm_paths",
    "reduce_antithetic_pairs",
]


class VarianceReduction:
    """Variance-reduction mode labels."""
    NONE = "none"
    ANTITHETIC = "antithetic"
    MOMENT_MATCHING = "moment_matching"
    ANTITHETIC_MOMENT_MATCHING = "antithetic_moment_matching"


VARIANCE_REDUCTION_MODES = (
    VarianceReduction.NONE,
    VarianceReduction.ANTITHETIC,
    VarianceReduction.MOMENT_MATCHING,
    VarianceReduction.ANTITHETIC_MOMENT_MATCHING,
)


def uses_antithetic(mode: str) -> bool:
    return mode in (VarianceReduction.ANTITHETIC,
                    VarianceReduction.ANTITHETIC_MOMENT_MATCHING)


def uses_moment_matching(mode: str) -> bool:
    return mode in (VarianceReduction.MOMENT_MATCHING,
                    VarianceReduction.ANTITHETIC_MOMENT_MATCHING)


def moment_match(Z: np.ndarray) -> np.ndarray:
    """Demean the whole block and scale it to unit (population) std."""
    if Z.size == 0:
        return Z
    Z = Z - Z.mean()
    sd = Z.std()
    return Z / sd if sd > 0.0 else Z


# ---------------------------------------------------------------------------
# Geometric Brownian Motion
# ---------------------------------------------------------------------------
def gbm_paths(
    S0: float, r: float, q: float, sigma: float,
    T: float, n_steps: int, n_paths: int,
    *, variance_reduction: str = VarianceReduction.NONE,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Exact-discretization GBM under Q:
        dS/S = (r - q) dt + sigma dW
        S_{t+dt} = S_t * exp((r - q - 0.5*sigma^2) dt + sigma * sqrt(dt) * Z)

    With ``T <= 0`` or ``sigma <= 0`` every path stays at S0 and no random
    numbers are drawn.  Antithetic modes draw ``ceil(n_paths / 2)`` base
    columns; an odd path count leaves the last column unpaired.
    """
    if n_steps <= 0:
        raise ValueError(f"n_steps must be positive, got {n_steps}")
    if n_paths < 0:
        raise ValueError(f"n_paths must be non-negative, got {n_paths}")
    if variance_reduction not in VARIANCE_REDUCTION_MODES:
        raise ValueError(
            f"variance_reduction must be one of {VARIANCE_REDUCTION_MODES}, "
            f"got {variance_reduction!r}"
        )

    S = np.full((n_steps + 1, n_paths), S0, dtype=float)
    if n_paths == 0 or T <= 0.0 or sigma <= 0.0:
        return S

    if rng is None:
        rng = np.random.default_rng()
    dt = T / n_steps
    drift = (r - q - 0.5 * sigma * sigma) * dt
    vol = sigma * np.sqrt(dt)

    antithetic = uses_antithetic(variance_reduction)
    n_base = (n_paths + 1) // 2 if antithetic else n_paths

    Z_base = rng.standard_normal((n_steps, n_base))
    if uses_moment_matching(variance_reduction):
        Z_base = moment_match(Z_base)

    if antithetic:
        Z = np.empty((n_steps, n_paths))
        Z[:, 0::2] = Z_base
        Z[:, 1::2] = -Z_base[:, : n_paths // 2]
    else:
        Z = Z_base

    log_paths = np.cumsum(drift + vol * Z, axis=0)
    S[1:, :] = S0 * np.exp(log_paths)
    return S


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------
def reduce_antithetic_pairs(sample: np.ndarray) -> np.ndarray:
    """Average adjacent (2k, 2k+1) entries; a trailing odd entry is kept."""
    sample = np.asarray(sample, dtype=float)
    n_pairs = sample.size // 2
    paired = 0.5 * (sample[0:2 * n_pairs:2] + sample[1:2 * n_pairs:2])
    if sample.size % 2:
        paired = np.append(paired, sample[-1])
    return paired
