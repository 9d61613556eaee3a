import math
import pytest
from optengine import (
    OptionParams, OptionSpec, Payoff, BlackScholesEngine, CALL, PUT, AMERICAN,
)

PARAMS = OptionParams(S=100, K=100, r=0.05, q=0.0, sigma=0.2, T=1.0)
ENGINE = BlackScholesEngine()


def _spec(kind, K=100.0):
    return OptionSpec(Payoff(K, kind))


def test_bs_known_values():
    assert abs(ENGINE.price(_spec(CALL), PARAMS).value - 10.4506) < 1e-3
    assert abs(ENGINE.price(_spec(PUT), PARAMS).value  - 5.5735)  < 1e-3


def test_atm_zero_rates_call_equals_put():
    params = OptionParams(S=100, K=100, r=0.0, q=0.0, sigma=0.3, T=0.75)
    c = ENGINE.price(_spec(CALL), params).value
    p = ENGINE.price(_spec(PUT), params).value
    assert c == pytest.approx(p, abs=1e-12)


def test_put_call_parity_with_dividend():
    params = OptionParams(S=100, K=110, r=0.03, q=0.02, sigma=0.25, T=0.5)
    c = ENGINE.price(_spec(CALL, 110), params).value
    p = ENGINE.price(_spec(PUT, 110), params).value
    parity = 100 * math.exp(-0.02 * 0.5) - 110 * math.exp(-0.03 * 0.5)
    assert c - p == pytest.approx(parity, abs=1e-10)


class TestGreeks:
    def test_delta_matches_bump(self):
        out = ENGINE.price(_spec(CALL), PARAMS)
        h = 1e-4
        up = ENGINE.price(_spec(CALL), OptionParams(100 + h, 100, 0.05, 0.0, 0.2, 1.0)).value
        dn = ENGINE.price(_spec(CALL), OptionParams(100 - h, 100, 0.05, 0.0, 0.2, 1.0)).value
        assert out.delta == pytest.approx((up - dn) / (2 * h), abs=1e-6)

    def test_vega_and_rho_match_bump(self):
        h = 1e-5
        for kind in (CALL, PUT):
            out = ENGINE.price(_spec(kind), PARAMS)
            v_up = ENGINE.price(_spec(kind), OptionParams(100, 100, 0.05, 0.0, 0.2 + h, 1.0)).value
            v_dn = ENGINE.price(_spec(kind), OptionParams(100, 100, 0.05, 0.0, 0.2 - h, 1.0)).value
            r_up = ENGINE.price(_spec(kind), OptionParams(100, 100, 0.05 + h, 0.0, 0.2, 1.0)).value
            r_dn = ENGINE.price(_spec(kind), OptionParams(100, 100, 0.05 - h, 0.0, 0.2, 1.0)).value
            assert out.vega == pytest.approx((v_up - v_dn) / (2 * h), rel=1e-5)
            assert out.rho == pytest.approx((r_up - r_dn) / (2 * h), rel=1e-5)

    def test_put_delta_negative_call_delta_positive(self):
        assert ENGINE.price(_spec(CALL), PARAMS).delta > 0
        assert ENGINE.price(_spec(PUT), PARAMS).delta < 0

    def test_gamma_and_vega_equal_across_kinds(self):
        c = ENGINE.price(_spec(CALL), PARAMS)
        p = ENGINE.price(_spec(PUT), PARAMS)
        assert c.gamma == pytest.approx(p.gamma)
        assert c.vega == pytest.approx(p.vega)

    def test_atm_call_theta_negative(self):
        assert ENGINE.price(_spec(CALL), PARAMS).theta < 0

    def test_no_sampling_error(self):
        out = ENGINE.price(_spec(CALL), PARAMS)
        assert out.std_dev == 0.0 and out.std_error == 0.0


class TestDegenerate:
    @pytest.mark.parametrize("T, sigma", [(0.0, 0.2), (-1.0, 0.2), (1.0, 0.0)])
    def test_intrinsic_shortcut(self, T, sigma):
        params = OptionParams(S=120, K=100, r=0.05, q=0.0, sigma=sigma, T=T)
        out = ENGINE.price(_spec(CALL), params)
        assert out.value == 20.0
        assert (out.delta, out.gamma, out.vega, out.theta, out.rho) == (0.0,) * 5
        assert ENGINE.price(_spec(PUT), params).value == 0.0


def test_rejects_american():
    with pytest.raises(ValueError, match="European"):
        ENGINE.price(OptionSpec(Payoff(100, PUT), AMERICAN), PARAMS)


class TestZeroSpotOrStrike:
    def test_zero_spot(self):
        params = OptionParams(S=0.0, K=100, r=0.05, q=0.0, sigma=0.2, T=1.0)
        call = ENGINE.price(_spec(CALL), params)
        put = ENGINE.price(_spec(PUT), params)
        assert call.value == 0.0 and call.delta == 0.0
        assert put.value == pytest.approx(100 * math.exp(-0.05))
        assert put.delta == pytest.approx(-1.0)
        assert put.rho == pytest.approx(-100 * math.exp(-0.05))
        assert put.gamma == 0.0 and put.vega == 0.0

    def test_zero_strike(self):
        params = OptionParams(S=100, K=0.0, r=0.05, q=0.02, sigma=0.2, T=1.0)
        call = ENGINE.price(_spec(CALL, 0.0), params)
        assert call.value == pytest.approx(100 * math.exp(-0.02))
        assert call.delta == pytest.approx(math.exp(-0.02))
        assert call.theta == pytest.approx(0.02 * 100 * math.exp(-0.02))
        assert ENGINE.price(_spec(PUT, 0.0), params).value == 0.0

    def test_limit_matches_small_strike(self):
        params = OptionParams(S=100, K=1e-6, r=0.05, q=0.0, sigma=0.2, T=1.0)
        limit = ENGINE.price(_spec(CALL, 0.0), OptionParams(100, 0.0, 0.05, 0.0, 0.2, 1.0))
        near = ENGINE.price(_spec(CALL, 1e-6), params)
        assert near.value == pytest.approx(limit.value, abs=1e-5)
        assert near.delta == pytest.approx(limit.delta, abs=1e-9)
