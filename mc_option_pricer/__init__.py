"""
Monte Carlo Option Pricer

Prices European options by Monte Carlo simulation of Geometric Brownian
Motion across parallel workers, with the closed-form Black-Scholes price
as the analytical reference.
"""

from .accumulator import AccumulatedStatistics
from .black_scholes import Greeks, bs_call, bs_greeks, bs_price, bs_put
from .config import EngineConfig
from .errors import (
    InvalidMaturityError,
    InvalidPathCountError,
    InvalidSpotPriceError,
    InvalidStepCountError,
    InvalidStrikeError,
    NegativeRateError,
    NegativeVolatilityError,
    ParameterValidationError,
)
from .gbm import GBMSimulator, PathMode, SimulationParameters
from .payoffs import OptionType, call_payoff, put_payoff
from .pricing import (
    MonteCarloEngine,
    PricingComparison,
    PricingRequest,
    PricingResult,
    monte_carlo_price,
)
from .random_source import NormalStream, spawn_streams

__all__ = [
    "AccumulatedStatistics",
    "EngineConfig",
    "GBMSimulator",
    "Greeks",
    "MonteCarloEngine",
    "NormalStream",
    "OptionType",
    "PathMode",
    "PricingComparison",
    "PricingRequest",
    "PricingResult",
    "SimulationParameters",
    "bs_call",
    "bs_greeks",
    "bs_price",
    "bs_put",
    "call_payoff",
    "monte_carlo_price",
    "put_payoff",
    "spawn_streams",
    "ParameterValidationError",
    "InvalidSpotPriceError",
    "InvalidStrikeError",
    "NegativeRateError",
    "NegativeVolatilityError",
    "InvalidMaturityError",
    "InvalidStepCountError",
    "InvalidPathCountError",
]

__version__ = "0.1.0"
