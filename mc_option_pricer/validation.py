"""
Input validation for simulation and pricing parameters.

Checks are pure functions returning a list of failures, so they can be
tested without any random draws. ``raise_for_failures`` turns the first
failure into its named exception.

Comparisons are written as ``not (x > 0)`` so NaN is rejected too.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

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


class FailureKind(Enum):
    """Kind of validation failure: (field, constraint, exception class)."""

    NON_POSITIVE_SPOT = ("s0", "> 0", InvalidSpotPriceError)
    NON_POSITIVE_STRIKE = ("strike", "> 0", InvalidStrikeError)
    NEGATIVE_RATE = ("r", ">= 0", NegativeRateError)
    NEGATIVE_VOLATILITY = ("sigma", ">= 0", NegativeVolatilityError)
    NON_POSITIVE_MATURITY = ("t", "> 0", InvalidMaturityError)
    NON_POSITIVE_STEPS = ("steps", ">= 1", InvalidStepCountError)
    NON_POSITIVE_PATHS = ("n_paths", ">= 1", InvalidPathCountError)
    ODD_ANTITHETIC_PATHS = ("n_paths", "even with antithetic sampling", InvalidPathCountError)

    @property
    def field(self) -> str:
        return self.value[0]

    @property
    def constraint(self) -> str:
        return self.value[1]

    @property
    def error_class(self) -> type:
        return self.value[2]


@dataclass(frozen=True)
class ValidationFailure:
    """A single violated constraint and the offending value."""

    kind: FailureKind
    value: Any

    @property
    def field(self) -> str:
        return self.kind.field

    @property
    def message(self) -> str:
        return f"{self.kind.field} must be {self.kind.constraint}, got {self.value!r}"

    def to_exception(self) -> ParameterValidationError:
        return self.kind.error_class(self.kind.field, self.value, self.kind.constraint)


def check_simulation_inputs(
    s0: float, sigma: float, t: float, steps: int
) -> list[ValidationFailure]:
    """Validate GBM simulation parameters (S0, sigma, T, steps)."""
    failures = []
    if not s0 > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_SPOT, s0))
    if not sigma >= 0:
        failures.append(ValidationFailure(FailureKind.NEGATIVE_VOLATILITY, sigma))
    if not t > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_MATURITY, t))
    if not steps >= 1:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_STEPS, steps))
    return failures


def check_rate(r: float) -> list[ValidationFailure]:
    """Validate the risk-free rate used for drift and discounting."""
    if not r >= 0:
        return [ValidationFailure(FailureKind.NEGATIVE_RATE, r)]
    return []


def check_request_inputs(
    strike: float, n_paths: int, r: float, antithetic: bool = False
) -> list[ValidationFailure]:
    """
    Validate the Monte Carlo specific inputs (K, n_paths, r).

    Antithetic sampling draws whole (Z, -Z) pairs, so it needs an even
    path count.
    """
    failures = []
    if not strike > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_STRIKE, strike))
    if not n_paths >= 1:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_PATHS, n_paths))
    elif antithetic and n_paths % 2:
        failures.append(ValidationFailure(FailureKind.ODD_ANTITHETIC_PATHS, n_paths))
    failures.extend(check_rate(r))
    return failures


def check_market_inputs(
    s0: float, strike: float, sigma: float, t: float
) -> list[ValidationFailure]:
    """Validate closed-form pricer inputs. The rate is unconstrained there."""
    failures = []
    if not s0 > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_SPOT, s0))
    if not strike > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_STRIKE, strike))
    if not sigma >= 0:
        failures.append(ValidationFailure(FailureKind.NEGATIVE_VOLATILITY, sigma))
    if not t > 0:
        failures.append(ValidationFailure(FailureKind.NON_POSITIVE_MATURITY, t))
    return failures


def raise_for_failures(failures: Iterable[ValidationFailure]) -> None:
    """Raise the exception for the first failure, if there is one."""
    for failure in failures:
        raise failure.to_exception()
