# stats.py
# Normal-distribution and sample-statistics helpers used by the engines.

from __future__ import annotations
import numpy as np
from scipy.stats import norm

__all__ = [
    "density",
    "cumulative",
    "mean",
    "standard_deviation",
    "standard_error",
]


# ---------------------------------------------------------------------------
# Standard normal
# ---------------------------------------------------------------------------
def density(x):
    """Standard normal PDF.  Scalars in, floats out; arrays broadcast."""
    out = norm.pdf(x)
    return float(out) if np.ndim(out) == 0 else out


def cumulative(x):
    """Standard normal CDF.  Scalars in, floats out; arrays broadcast."""
    out = norm.cdf(x)
    return float(out) if np.ndim(out) == 0 else out


# ---------------------------------------------------------------------------
# Sample statistics
# ---------------------------------------------------------------------------
def mean(sample) -> float:
    """Arithmetic mean; 0 for an empty sample."""
    x = np.asarray(sample, dtype=float)
    if x.size == 0:
        return 0.0
    return float(x.mean())


def standard_deviation(sample) -> float:
    """Bessel-corrected sample standard deviation; 0 below two elements."""
    x = np.asarray(sample, dtype=float)
    if x.size < 2:
        return 0.0
    return float(x.std(ddof=1))


def standard_error(sample) -> float:
    """``standard_deviation / sqrt(n)``; 0 for an empty sample."""
    x = np.asarray(sample, dtype=float)
    if x.size == 0:
        return 0.0
    return standard_deviation(x) / float(np.sqrt(x.size))
