"""Tests for path-dependent option pricing.

Validation strategies:
- Payoffs on hand-built paths
- Barrier: in/out parity (knock-in + knock-out = vanilla on the same paths)
- Lookback dominates the vanilla pathwise, Asian sits below it
"""

import math
import numpy as np
import pytest

from optengine import (
    OptionParams, OptionSpec, Payoff, PathDependentOptionSpec, CALL, PUT,
    ASIAN, BARRIER, LOOKBACK, UP_AND_OUT, UP_AND_IN, DOWN_AND_OUT, DOWN_AND_IN,
    EuropeanMonteCarloEngine, PathDependentMonteCarloEngine, VarianceReduction,
)
from optengine.exotics import (
    asian_payoff, barrier_hit, barrier_payoff, lookback_payoff, path_payoff,
)

PARAMS = OptionParams(S=100, K=100, r=0.05, q=0.0, sigma=0.2, T=1.0)
N_PATHS, N_STEPS, SEED = 20_000, 50, 42

# two paths as columns: A = [100, 125, 110], B = [100, 105, 110]
HAND = np.array([[100.0, 100.0],
                 [125.0, 105.0],
                 [110.0, 110.0]])


def _engine(**kw):
    return PathDependentMonteCarloEngine(paths=N_PATHS, time_steps=N_STEPS, seed=SEED, **kw)


def _vanilla(kind, **kw):
    engine = EuropeanMonteCarloEngine(paths=N_PATHS, time_steps=N_STEPS, seed=SEED, **kw)
    return engine.price(OptionSpec(Payoff(100, kind)), PARAMS)


# ---------------------------------------------------------------------------
# Payoffs on hand-built paths
# ---------------------------------------------------------------------------
class TestPayoffs:
    def test_asian_includes_initial_spot(self):
        np.testing.assert_allclose(asian_payoff(HAND, 100.0, CALL), [35.0 / 3.0, 5.0])
        np.testing.assert_allclose(asian_payoff(HAND, 110.0, PUT), [0.0, 5.0])

    def test_barrier_hit_is_inclusive(self):
        np.testing.assert_array_equal(barrier_hit(HAND, 125.0, up=True), [True, False])
        np.testing.assert_array_equal(barrier_hit(HAND, 100.0, up=False), [True, True])

    @pytest.mark.parametrize("barrier_type, expected", [
        (UP_AND_OUT, [0.0, 10.0]),
        (UP_AND_IN, [10.0, 0.0]),
    ])
    def test_up_barrier(self, barrier_type, expected):
        np.testing.assert_allclose(
            barrier_payoff(HAND, 100.0, CALL, 120.0, barrier_type), expected)

    def test_down_barrier(self):
        out = barrier_payoff(HAND, 100.0, CALL, 90.0, DOWN_AND_OUT)
        np.testing.assert_allclose(out, [10.0, 10.0])
        assert not barrier_payoff(HAND, 100.0, CALL, 90.0, DOWN_AND_IN).any()

    def test_lookback(self):
        np.testing.assert_allclose(lookback_payoff(HAND, 100.0, CALL), [25.0, 10.0])
        np.testing.assert_allclose(lookback_payoff(HAND, 120.0, PUT), [20.0, 20.0])

    def test_dispatch(self):
        spec = PathDependentOptionSpec(LOOKBACK, CALL, 100.0)
        np.testing.assert_allclose(path_payoff(HAND, spec), [25.0, 10.0])


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class TestBarrierParity:
    @pytest.mark.parametrize("kind, barrier, up", [(CALL, 120.0, True), (PUT, 85.0, False)])
    def test_in_plus_out_is_vanilla(self, kind, barrier, up):
        b_in, b_out = (UP_AND_IN, UP_AND_OUT) if up else (DOWN_AND_IN, DOWN_AND_OUT)
        p_in = _engine().price(PathDependentOptionSpec(BARRIER, kind, 100, barrier, b_in), PARAMS)
        p_out = _engine().price(PathDependentOptionSpec(BARRIER, kind, 100, barrier, b_out), PARAMS)
        assert p_in.value + p_out.value == pytest.approx(_vanilla(kind).value, abs=1e-10)

    def test_parity_with_antithetic(self):
        vr = VarianceReduction.ANTITHETIC
        p_in = _engine(variance_reduction=vr).price(
            PathDependentOptionSpec(BARRIER, CALL, 100, 120.0, UP_AND_IN), PARAMS)
        p_out = _engine(variance_reduction=vr).price(
            PathDependentOptionSpec(BARRIER, CALL, 100, 120.0, UP_AND_OUT), PARAMS)
        vanilla = _vanilla(CALL, variance_reduction=vr).value
        assert p_in.value + p_out.value == pytest.approx(vanilla, abs=1e-10)

    def test_knockout_below_vanilla(self):
        out = _engine().price(PathDependentOptionSpec(BARRIER, CALL, 100, 130.0, UP_AND_OUT), PARAMS)
        assert out.value <= _vanilla(CALL).value


class TestAsianLookback:
    def test_asian_call_below_vanilla(self):
        asian = _engine().price(PathDependentOptionSpec(ASIAN, CALL, 100), PARAMS)
        assert 0.0 < asian.value < _vanilla(CALL).value

    @pytest.mark.parametrize("kind", [CALL, PUT])
    def test_lookback_dominates_vanilla(self, kind):
        lb = _engine().price(PathDependentOptionSpec(LOOKBACK, kind, 100), PARAMS)
        assert lb.value >= _vanilla(kind).value

    def test_lookback_call_bounds(self):
        lb = _engine().price(PathDependentOptionSpec(LOOKBACK, CALL, 100), PARAMS)
        assert 0.0 < lb.value < 2.0 * PARAMS.S
        assert lb.std_error > 0.0


class TestEngineContract:
    def test_rejects_vanilla_spec(self):
        with pytest.raises(ValueError, match="PathDependentOptionSpec"):
            _engine().price(OptionSpec(Payoff(100, CALL)), PARAMS)

    def test_zero_volatility_paths_are_flat(self):
        params = OptionParams(S=110, K=100, r=0.05, q=0.0, sigma=0.0, T=1.0)
        out = _engine().price(PathDependentOptionSpec(ASIAN, CALL, 100), params)
        assert out.value == pytest.approx(10.0 * math.exp(-0.05))
        assert out.std_error == pytest.approx(0.0, abs=1e-12)

    def test_reproducible(self):
        spec = PathDependentOptionSpec(ASIAN, PUT, 100)
        assert _engine().price(spec, PARAMS) == _engine().price(spec, PARAMS)

    def test_expired_contract_not_discounted_forward(self):
        params = OptionParams(S=110, K=100, r=0.05, q=0.0, sigma=0.2, T=-2.0)
        out = _engine().price(PathDependentOptionSpec(LOOKBACK, CALL, 100), params)
        assert out.value == pytest.approx(10.0)
