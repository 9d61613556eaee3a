# optengine: options pricing engines
# Public API

# Data model
from .core import (
    OptionParams, Payoff, OptionSpec, PathDependentOptionSpec, PriceOutputs,
    CALL, PUT, EUROPEAN, AMERICAN, ASIAN, BARRIER, LOOKBACK,
    UP_AND_OUT, UP_AND_IN, DOWN_AND_OUT, DOWN_AND_IN,
)

# Engine contract
from .engine import PricingEngine

# Closed form
from .black_scholes import BlackScholesEngine

# Lattices
from .binomial import BinomialCRREngine
from .trinomial import TrinomialTreeEngine

# Monte Carlo
from .processes import VarianceReduction, gbm_paths
from .monte_carlo import MonteCarloEngine, EuropeanMonteCarloEngine
from .lsmc import AmericanLSMCEngine
from .exotics import PathDependentMonteCarloEngine

__all__ = [
    # Data model
    "OptionParams", "Payoff", "OptionSpec", "PathDependentOptionSpec", "PriceOutputs",
    "CALL", "PUT", "EUROPEAN", "AMERICAN", "ASIAN", "BARRIER", "LOOKBACK",
    "UP_AND_OUT", "UP_AND_IN", "DOWN_AND_OUT", "DOWN_AND_IN",
    # Engines
    "PricingEngine",
    "BlackScholesEngine",
    "BinomialCRREngine", "TrinomialTreeEngine",
    "VarianceReduction", "gbm_paths",
    "MonteCarloEngine", "EuropeanMonteCarloEngine",
    "AmericanLSMCEngine", "PathDependentMonteCarloEngine",
]

__version__ = "0.1.0"
