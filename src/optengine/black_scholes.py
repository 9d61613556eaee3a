import logging
from math import exp, log, sqrt

from .core import CALL, EUROPEAN, OptionParams, OptionSpec, PriceOutputs
from .engine import PricingEngine, require_exercise
from .stats import cumulative as _N, density as _n

logger = logging.getLogger(__name__)


def _d1_d2(S, K, T, r, q, sigma):
    rt = sigma * sqrt(T)
    d1 = (log(S / K) + (r - q + 0.5 * sigma * sigma) * T) / rt
    d2 = d1 - rt
    return d1, d2


def _forward_limit(kind, S, K, T, r, q) -> PriceOutputs:
    """Zero spot or zero strike: N(d1), N(d2) are 0 or 1 and the option is
    worth its forward intrinsic value.  Gamma and vega vanish."""
    disc_r = exp(-r * T)
    disc_q = exp(-q * T)
    fwd = S * disc_q - K * disc_r
    sign = 1.0 if kind == CALL else -1.0
    if sign * fwd <= 0.0:
        return PriceOutputs()
    return PriceOutputs(
        value=sign * fwd,
        delta=sign * disc_q,
        theta=sign * (q * S * disc_q - r * K * disc_r),
        rho=sign * K * T * disc_r,
    )


class BlackScholesEngine(PricingEngine):
    """Closed-form Black-Scholes value and Greeks for European options.

    Greeks use absolute units: vega is dPrice/dSigma (not per 1%), theta is
    dPrice/dt per year, rho is dPrice/dr.
    """

    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        require_exercise(spec, EUROPEAN, "Black-Scholes engine")

        if params.degenerate:
            logger.debug("degenerate inputs T=%s sigma=%s, returning intrinsic",
                         params.T, params.sigma)
            return PriceOutputs(value=spec.payoff(params.S))

        S, K, T, r, q, sigma = params.S, params.K, params.T, params.r, params.q, params.sigma
        if S <= 0.0 or K <= 0.0:
            return _forward_limit(spec.payoff.kind, S, K, T, r, q)

        d1, d2 = _d1_d2(S, K, T, r, q, sigma)
        n_d1   = _n(d1)
        disc_r = exp(-r * T)
        disc_q = exp(-q * T)
        sqrt_T = sqrt(T)

        # Common
        gamma = disc_q * n_d1 / (S * sigma * sqrt_T)
        vega  = S * disc_q * n_d1 * sqrt_T

        if spec.payoff.kind == CALL:
            value = disc_q * S * _N(d1) - disc_r * K * _N(d2)
            delta = disc_q * _N(d1)
            theta = (-S * disc_q * n_d1 * sigma / (2 * sqrt_T)
                     - r * K * disc_r * _N(d2)
                     + q * S * disc_q * _N(d1))
            rho   = K * T * disc_r * _N(d2)
        else:
            value = disc_r * K * _N(-d2) - disc_q * S * _N(-d1)
            delta = disc_q * (_N(d1) - 1.0)
            theta = (-S * disc_q * n_d1 * sigma / (2 * sqrt_T)
                     + r * K * disc_r * _N(-d2)
                     - q * S * disc_q * _N(-d1))
            rho   = -K * T * disc_r * _N(-d2)

        return PriceOutputs(value=value, delta=delta, gamma=gamma,
                            vega=vega, theta=theta, rho=rho)
