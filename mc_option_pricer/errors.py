"""
Exceptions raised when pricing inputs violate their constraints.

Every invalid field has its own exception class so callers can react to
the specific failure. All of them are ``ValueError`` subclasses.
"""

from typing import Any


class ParameterValidationError(ValueError):
    """Base class for invalid pricing or simulation inputs."""

    def __init__(self, field: str, value: Any, constraint: str):
        self.field = field
        self.value = value
        self.constraint = constraint
        super().__init__(f"{field} must be {constraint}, got {value!r}")


class InvalidSpotPriceError(ParameterValidationError):
    """Initial asset price S0 is zero or negative."""


class InvalidStrikeError(ParameterValidationError):
    """Strike price K is zero or negative."""


class NegativeRateError(ParameterValidationError):
    """Risk-free rate r is negative."""


class NegativeVolatilityError(ParameterValidationError):
    """Volatility sigma is negative."""


class InvalidMaturityError(ParameterValidationError):
    """Time to maturity T is zero or negative."""


class InvalidStepCountError(ParameterValidationError):
    """Number of discretization steps is zero or negative."""


class InvalidPathCountError(ParameterValidationError):
    """Number of Monte Carlo paths is zero or negative."""
