"""Bump-and-reprice spot Greeks.

The lattice engines re-run their whole tree at shocked spots; this module
turns the three resulting values into delta and gamma.
"""

from __future__ import annotations

from math import exp
from typing import Callable

__all__ = ["spot_greeks"]


def spot_greeks(
    value_at: Callable[[float], float],
    spot: float,
    base: float,
    *,
    log_bump: float,
) -> tuple[float, float]:
    """Delta and gamma from a log-spot shock of size ``log_bump``.

    Parameters
    ----------
    value_at : callable
        ``value_at(spot) -> float``, the pricer with everything but the spot
        held fixed.
    spot : float
        Unshocked spot.
    base : float
        ``value_at(spot)``, already computed by the caller.
    log_bump : float
        Shock ``h``; the pricer is re-run at ``spot * exp(+h)`` and
        ``spot * exp(-h)``.

    Returns
    -------
    tuple[float, float]
        ``(delta, gamma)``.  Both are zero when ``log_bump <= 0`` or
        ``spot <= 0``.

    Notes
    -----
    The two shocked spots are not symmetric around ``spot``, so gamma uses
    the non-uniform three-point second difference::

        gamma = 2 (h_dn V_up - (h_up + h_dn) V_0 + h_up V_dn)
                / (h_up h_dn (h_up + h_dn))
    """
    if log_bump <= 0.0 or spot <= 0.0:
        return 0.0, 0.0

    spot_up = spot * exp(log_bump)
    spot_dn = spot * exp(-log_bump)
    P_up = value_at(spot_up)
    P_dn = value_at(spot_dn)

    h_up = spot_up - spot
    h_dn = spot - spot_dn

    delta = 0.0
    if spot_up - spot_dn > 0.0:
        delta = (P_up - P_dn) / (spot_up - spot_dn)

    gamma = 0.0
    denom = h_up * h_dn * (h_up + h_dn)
    if h_up > 0.0 and h_dn > 0.0 and denom != 0.0:
        gamma = 2.0 * (h_dn * P_up - (h_up + h_dn) * base + h_up * P_dn) / denom

    return float(delta), float(gamma)
