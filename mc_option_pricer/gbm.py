"""
Geometric Brownian Motion (GBM) simulation engine for stock prices.

Under the risk-neutral measure the stock price follows:
    dS = rS dt + σS dW

where:
    S = stock price
    r = risk-free rate
    σ = volatility
    dW = Wiener process increment

Two generation modes are available. The terminal mode uses the exact
solution of the SDE at maturity and needs one normal draw per path; it is
the default for European payoffs. The discretized mode walks the path
step by step and produces the full trajectory.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .random_source import NormalStream
from .validation import check_rate, check_simulation_inputs, raise_for_failures


class PathMode(Enum):
    """How a path sample is generated."""

    TERMINAL = "terminal"  # Closed-form S(T), one draw per path
    DISCRETIZED = "discretized"  # Full path, one draw per step


@dataclass(frozen=True)
class SimulationParameters:
    """Parameters for Geometric Brownian Motion simulation."""

    s0: float  # Initial stock price
    sigma: float  # Volatility (annualized)
    t: float  # Time to maturity (in years)
    steps: int = 1  # Number of time steps for the discretized mode

    def __post_init__(self):
        raise_for_failures(
            check_simulation_inputs(self.s0, self.sigma, self.t, self.steps)
        )

    @property
    def dt(self) -> float:
        return self.t / self.steps


class GBMSimulator:
    """
    Simulator for generating risk-neutral stock prices using GBM.

    Uses the exact solution for GBM:
        S(t) = S(0) * exp((r - σ²/2)t + σW(t))

    The simulator draws from the stream it is given and must not be shared
    between workers.
    """

    def __init__(
        self,
        params: SimulationParameters,
        r: float,
        stream: Optional[NormalStream] = None,
    ):
        """
        Initialize the GBM simulator.

        Args:
            params: Validated simulation parameters (s0, sigma, t, steps)
            r: Risk-free rate used as the drift
            stream: Normal stream owned by this simulator (fresh one if None)
        """
        raise_for_failures(check_rate(r))
        self.params = params
        self.r = r
        self.stream = stream if stream is not None else NormalStream()

    def _log_increment(self, dt: float, z):
        sigma = self.params.sigma
        return (self.r - 0.5 * sigma**2) * dt + sigma * np.sqrt(dt) * z

    def terminal_price(self) -> float:
        """Simulate a single terminal price S(T) with one normal draw."""
        z = self.stream.next_standard_normal()
        return float(self.params.s0 * np.exp(self._log_increment(self.params.t, z)))

    def simulate_terminal(self, n_paths: int, antithetic: bool = False) -> np.ndarray:
        """
        Simulate terminal stock prices at maturity.

        Args:
            n_paths: Number of simulation paths
            antithetic: If True, draw n_paths // 2 normals Z and return the
                prices for Z followed by the prices for -Z (n_paths must be even)

        Returns:
            Array of terminal stock prices with shape (n_paths,)
        """
        z = self._draw(n_paths, antithetic)
        return self.params.s0 * np.exp(self._log_increment(self.params.t, z))

    def simulate_path(self) -> np.ndarray:
        """
        Simulate one discretized path.

        Returns:
            Array of shape (steps + 1,); element 0 is S(0), the last is S(T)
        """
        steps = self.params.steps
        dt = self.params.dt
        path = np.empty(steps + 1)
        path[0] = self.params.s0
        for i in range(1, steps + 1):
            z = self.stream.next_standard_normal()
            path[i] = path[i - 1] * np.exp(self._log_increment(dt, z))
        return path

    def simulate_paths(self, n_paths: int, antithetic: bool = False) -> np.ndarray:
        """
        Simulate full stock price paths from time 0 to maturity.

        Args:
            n_paths: Number of simulation paths
            antithetic: If True, the second half of the rows uses the negated
                increments of the first half (n_paths must be even)

        Returns:
            Array of stock price paths with shape (n_paths, steps + 1)
            First column is S(0), last column is S(T)
        """
        steps = self.params.steps
        z = self._draw(n_paths, antithetic, steps)

        paths = np.empty((n_paths, steps + 1))
        paths[:, 0] = self.params.s0
        log_returns = self._log_increment(self.params.dt, z)
        paths[:, 1:] = self.params.s0 * np.exp(np.cumsum(log_returns, axis=1))
        return paths

    def get_time_grid(self) -> np.ndarray:
        """Time points of the discretized path, shape (steps + 1,)."""
        return np.linspace(0, self.params.t, self.params.steps + 1)

    def _draw(self, n_paths: int, antithetic: bool, steps: Optional[int] = None):
        if not antithetic:
            shape = n_paths if steps is None else (n_paths, steps)
            return self.stream.standard_normal(shape)
        if n_paths % 2:
            raise ValueError(f"antithetic sampling needs an even n_paths, got {n_paths}")
        half = n_paths // 2
        shape = half if steps is None else (half, steps)
        z = self.stream.standard_normal(shape)
        return np.concatenate([z, -z])
