from __future__ import annotations
from dataclasses import asdict, dataclass

import numpy as np

CALL = "call"
PUT  = "put"

EUROPEAN = "european"
AMERICAN = "american"

ASIAN    = "asian"        # arithmetic average
BARRIER  = "barrier"
LOOKBACK = "lookback"

UP_AND_OUT   = "up-and-out"
UP_AND_IN    = "up-and-in"
DOWN_AND_OUT = "down-and-out"
DOWN_AND_IN  = "down-and-in"

KINDS = (CALL, PUT)
EXERCISE_STYLES = (EUROPEAN, AMERICAN)
EXOTIC_TYPES = (ASIAN, BARRIER, LOOKBACK)
BARRIER_TYPES = (UP_AND_OUT, UP_AND_IN, DOWN_AND_OUT, DOWN_AND_IN)


def _check_kind(kind: str) -> None:
    if kind not in KINDS:
        raise ValueError(f"kind must be 'call' or 'put', got {kind!r}")


def intrinsic(spot, strike: float, kind: str):
    """Vanilla intrinsic value; ``spot`` may be a scalar or an array."""
    if kind == CALL:
        out = np.maximum(np.asarray(spot, dtype=float) - strike, 0.0)
    else:
        out = np.maximum(strike - np.asarray(spot, dtype=float), 0.0)
    return float(out) if out.ndim == 0 else out


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OptionParams:
    """Market and contract numbers for one pricing call.

    Degenerate inputs (``T <= 0`` or ``sigma <= 0``) are accepted; every
    engine collapses them to the intrinsic value instead of failing.

    Parameters
    ----------
    S : float
        Spot price.
    K : float
        Strike (duplicated on the payoff for convenience).
    r : float
        Continuously-compounded risk-free rate.
    q : float
        Continuous dividend yield.
    sigma : float
        Volatility.
    T : float
        Time to maturity in years.
    """
    S: float
    K: float
    r: float
    q: float
    sigma: float
    T: float

    @property
    def degenerate(self) -> bool:
        """True when no diffusion is left: expired or zero volatility."""
        return self.T <= 0.0 or self.sigma <= 0.0


# ---------------------------------------------------------------------------
# Vanilla contracts
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Payoff:
    """Plain-vanilla payoff ``max(S - K, 0)`` / ``max(K - S, 0)``."""
    strike: float
    kind: str = CALL

    def __post_init__(self):
        _check_kind(self.kind)

    def __call__(self, spot):
        return intrinsic(spot, self.strike, self.kind)


@dataclass(frozen=True)
class OptionSpec:
    """Vanilla payoff plus exercise style."""
    payoff: Payoff
    exercise: str = EUROPEAN

    def __post_init__(self):
        if self.exercise not in EXERCISE_STYLES:
            raise ValueError(
                f"exercise must be 'european' or 'american', got {self.exercise!r}"
            )

    @property
    def is_american(self) -> bool:
        return self.exercise == AMERICAN

    def with_exercise(self, exercise: str) -> OptionSpec:
        return OptionSpec(self.payoff, exercise)


# ---------------------------------------------------------------------------
# Path-dependent contracts
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PathDependentOptionSpec:
    """Exotic contract whose payoff needs the whole simulated path.

    Parameters
    ----------
    exotic_type : str
        ``"asian"`` (arithmetic average), ``"barrier"`` or ``"lookback"``.
    kind : str
        ``"call"`` or ``"put"``.
    strike : float
        Fixed strike.
    barrier : float
        Barrier level; only read for barrier options.
    barrier_type : str
        One of ``"up-and-out"``, ``"up-and-in"``, ``"down-and-out"``,
        ``"down-and-in"``; only read for barrier options.
    """
    exotic_type: str
    kind: str
    strike: float
    barrier: float = 0.0
    barrier_type: str = UP_AND_OUT

    def __post_init__(self):
        if self.exotic_type not in EXOTIC_TYPES:
            raise ValueError(
                f"exotic_type must be one of {EXOTIC_TYPES}, got {self.exotic_type!r}"
            )
        _check_kind(self.kind)
        if self.exotic_type == BARRIER:
            if self.barrier_type not in BARRIER_TYPES:
                raise ValueError(
                    f"barrier_type must be one of {BARRIER_TYPES}, got {self.barrier_type!r}"
                )
            if self.barrier <= 0:
                raise ValueError(f"barrier must be positive, got {self.barrier}")

    @property
    def knock_in(self) -> bool:
        return self.barrier_type.endswith("in")

    @property
    def up_barrier(self) -> bool:
        return self.barrier_type.startswith("up")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PriceOutputs:
    """Uniform pricing result.

    Vega is dPrice/dSigma (absolute), theta is dPrice/dt (per year), rho is
    dPrice/dr.  Monte-Carlo engines leave the Greeks at zero and fill
    ``std_dev`` / ``std_error`` instead.
    """
    value: float = 0.0
    delta: float = 0.0
    gamma: float = 0.0
    vega: float = 0.0
    theta: float = 0.0
    rho: float = 0.0
    std_dev: float = 0.0
    std_error: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return asdict(self)
