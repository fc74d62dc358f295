"""
Running first and second moments of discounted payoffs.

Each worker fills its own ``AccumulatedStatistics``; the partial results
are combined once at the end. Combination is commutative and associative,
so any fan-in order gives the same moments (up to floating-point rounding).

Sums are kept relative to a shift, the first sample an accumulator sees.
A stream of identical payoffs therefore accumulates sums of exactly zero
and reports a variance of exactly zero.
"""

import math
from dataclasses import dataclass
from functools import reduce
from typing import Iterable

import numpy as np


@dataclass
class AccumulatedStatistics:
    """Shifted sum, shifted sum of squares and count of discounted payoffs."""

    total: float = 0.0  # sum of (x - shift)
    total_sq: float = 0.0  # sum of (x - shift)^2
    count: int = 0
    shift: float = 0.0

    def add(self, values: np.ndarray) -> None:
        """Accumulate a batch of samples in place."""
        values = np.asarray(values, dtype=float).ravel()
        if values.size == 0:
            return
        if self.count == 0:
            self.shift = float(values[0])
        deviations = values - self.shift
        self.total += float(deviations.sum())
        self.total_sq += float(np.dot(deviations, deviations))
        self.count += int(values.size)

    def merge(self, other: "AccumulatedStatistics") -> "AccumulatedStatistics":
        """Return a new accumulator holding both operands' samples."""
        if other.count == 0:
            return AccumulatedStatistics(self.total, self.total_sq, self.count, self.shift)
        if self.count == 0:
            return AccumulatedStatistics(other.total, other.total_sq, other.count, other.shift)
        # Re-express the other operand's sums around this operand's shift
        delta = other.shift - self.shift
        return AccumulatedStatistics(
            total=self.total + other.total + other.count * delta,
            total_sq=(
                self.total_sq
                + other.total_sq
                + 2.0 * delta * other.total
                + other.count * delta * delta
            ),
            count=self.count + other.count,
            shift=self.shift,
        )

    __add__ = merge

    @classmethod
    def combine(
        cls, parts: Iterable["AccumulatedStatistics"]
    ) -> "AccumulatedStatistics":
        """Reduce worker-local accumulators into one total."""
        return reduce(cls.merge, parts, cls())

    @property
    def mean(self) -> float:
        if self.count == 0:
            return 0.0
        return self.shift + self.total / self.count

    @property
    def variance(self) -> float:
        """
        Population (plug-in) variance E[X^2] - E[X]^2, taken around the shift.

        Biased by a factor (n - 1) / n, negligible at Monte Carlo sample
        sizes. Clamped at zero against rounding.
        """
        if self.count == 0:
            return 0.0
        centred = self.total / self.count
        return max(self.total_sq / self.count - centred * centred, 0.0)

    @property
    def standard_error(self) -> float:
        if self.count == 0:
            return 0.0
        return math.sqrt(self.variance / self.count)
