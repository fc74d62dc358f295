"""
Payoff functions for European options.

Payoffs are pure functions of the terminal price and the strike; they
accept scalars or numpy arrays and are never negative.
"""

from enum import Enum
from typing import Union

import numpy as np


def call_payoff(s, k):
    """European call payoff: max(S(T) - K, 0)"""
    return np.maximum(s - k, 0.0)


def put_payoff(s, k):
    """European put payoff: max(K - S(T), 0)"""
    return np.maximum(k - s, 0.0)


class OptionType(Enum):
    """Call or put."""

    CALL = "call"
    PUT = "put"

    @classmethod
    def parse(cls, value: Union[str, "OptionType"]) -> "OptionType":
        """Accept an OptionType or its name ("call"/"put", any case)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"option_type must be 'call' or 'put', got {value!r}") from exc

    def payoff(self, s, k):
        """Evaluate this option's payoff for terminal price(s) ``s``."""
        if self is OptionType.CALL:
            return call_payoff(s, k)
        return put_payoff(s, k)


def terminal_prices(paths: np.ndarray) -> np.ndarray:
    """Terminal prices of either terminal samples (1D) or full paths (2D)."""
    return paths if paths.ndim == 1 else paths[:, -1]
