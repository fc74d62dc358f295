"""
Monte Carlo pricing engine for European options.

Prices options by computing the expected discounted payoff under the
risk-neutral measure:

    price = E[e^(-rT) * payoff(S(T))]

The requested paths are split statically across workers. Every worker owns
an independent normal stream and a private accumulator of the sum and sum
of squares of discounted payoffs; nothing is shared while they run. The
partial accumulators are combined once, after all workers have finished.
"""

import logging
import math
import multiprocessing as mp
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .accumulator import AccumulatedStatistics
from .black_scholes import bs_price
from .config import CONFIDENCE_Z_95, EngineConfig
from .gbm import GBMSimulator, PathMode, SimulationParameters
from .payoffs import OptionType, terminal_prices
from .random_source import NormalStream, root_seed_sequence
from .validation import ValidationFailure, check_request_inputs, raise_for_failures

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingRequest:
    """Everything needed for one Monte Carlo pricing run."""

    params: SimulationParameters
    strike: float
    option_type: OptionType
    n_paths: int
    r: float
    antithetic: bool = False
    path_mode: PathMode = PathMode.TERMINAL

    def __post_init__(self):
        object.__setattr__(self, "option_type", OptionType.parse(self.option_type))
        raise_for_failures(self.failures())

    def failures(self) -> list[ValidationFailure]:
        return check_request_inputs(self.strike, self.n_paths, self.r, self.antithetic)

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    @property
    def discount_factor(self) -> float:
        return math.exp(-self.r * self.params.t)

    @classmethod
    def from_scalars(
        cls,
        s0: float,
        strike: float,
        r: float,
        sigma: float,
        t: float,
        steps: int,
        n_paths: int,
        option_type: Union[str, OptionType] = OptionType.CALL,
        **kwargs,
    ) -> "PricingRequest":
        """Build a request from flat scalar inputs."""
        params = SimulationParameters(s0=s0, sigma=sigma, t=t, steps=steps)
        return cls(
            params=params,
            strike=strike,
            option_type=OptionType.parse(option_type),
            n_paths=n_paths,
            r=r,
            **kwargs,
        )


@dataclass(frozen=True)
class PricingResult:
    """Result of Monte Carlo pricing."""

    price: float  # Estimated option price
    standard_error: float  # Standard error of the estimate
    n_paths: int  # Number of simulation paths used
    confidence_interval_95: tuple[float, float]  # 95% confidence interval
    execution_time: float = 0.0  # Wall-clock seconds

    def __str__(self) -> str:
        return (
            f"Price: {self.price:.6f} "
            f"(SE: {self.standard_error:.6f}, "
            f"95% CI: [{self.confidence_interval_95[0]:.6f}, "
            f"{self.confidence_interval_95[1]:.6f}])"
        )

    @classmethod
    def from_statistics(
        cls, stats: AccumulatedStatistics, n_paths: int, execution_time: float = 0.0
    ) -> "PricingResult":
        price = stats.mean
        std_error = stats.standard_error
        return cls(
            price=price,
            standard_error=std_error,
            n_paths=n_paths,
            confidence_interval_95=(
                price - CONFIDENCE_Z_95 * std_error,
                price + CONFIDENCE_Z_95 * std_error,
            ),
            execution_time=execution_time,
        )


@dataclass(frozen=True)
class PricingComparison:
    """Monte Carlo estimate next to the Black-Scholes reference price."""

    result: PricingResult
    reference_price: float

    @property
    def absolute_error(self) -> float:
        return abs(self.result.price - self.reference_price)

    @property
    def relative_error(self) -> float:
        if self.reference_price == 0:
            return 0.0 if self.absolute_error == 0 else float("inf")
        return self.absolute_error / abs(self.reference_price)

    @property
    def error_in_standard_errors(self) -> float:
        """|MC - BS| measured in Monte Carlo standard errors."""
        if self.result.standard_error == 0:
            return 0.0 if self.absolute_error == 0 else float("inf")
        return self.absolute_error / self.result.standard_error


@dataclass(frozen=True)
class _WorkerTask:
    worker_id: int
    n_samples: int
    seed_seq: np.random.SeedSequence
    request: PricingRequest
    batch_size: int


def partition_paths(n_paths: int, n_workers: int) -> list[int]:
    """
    Split ``n_paths`` into static, roughly equal shares.

    Never uses more workers than paths; the last worker absorbs the
    remainder.

    >>> partition_paths(10, 3)
    [3, 3, 4]
    """
    if n_paths < 1:
        raise ValueError(f"n_paths must be >= 1, got {n_paths}")
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1, got {n_workers}")
    workers = min(n_workers, n_paths)
    base = n_paths // workers
    shares = [base] * workers
    shares[-1] += n_paths - base * workers
    return shares


def _draw_terminal(simulator: GBMSimulator, mode: PathMode, n_paths: int, antithetic: bool):
    if mode is PathMode.TERMINAL:
        return simulator.simulate_terminal(n_paths, antithetic=antithetic)
    return terminal_prices(simulator.simulate_paths(n_paths, antithetic=antithetic))


def _simulate_share(task: _WorkerTask) -> AccumulatedStatistics:
    """
    Run one worker's share of paths into a private accumulator.

    Module-level so process pools can pickle it. With antithetic sampling a
    sample is the average of the discounted payoffs of a (Z, -Z) pair and
    ``n_samples`` counts pairs.
    """
    start = time.perf_counter()
    request = task.request
    simulator = GBMSimulator(request.params, request.r, NormalStream(task.seed_seq))
    discount_factor = request.discount_factor
    stats = AccumulatedStatistics()

    batch_size = task.batch_size
    if request.path_mode is PathMode.DISCRETIZED:
        batch_size = max(1, batch_size // (request.params.steps + 1))

    remaining = task.n_samples
    while remaining > 0:
        size = min(batch_size, remaining)
        if request.antithetic:
            s_t = _draw_terminal(simulator, request.path_mode, 2 * size, True)
            discounted = discount_factor * request.option_type.payoff(s_t, request.strike)
            stats.add(0.5 * (discounted[:size] + discounted[size:]))
        else:
            s_t = _draw_terminal(simulator, request.path_mode, size, False)
            stats.add(discount_factor * request.option_type.payoff(s_t, request.strike))
        remaining -= size

    logger.debug(
        "worker %d finished %d samples in %.3fs",
        task.worker_id,
        task.n_samples,
        time.perf_counter() - start,
    )
    return stats


class MonteCarloEngine:
    """
    Monte Carlo engine for pricing European options.

    Prices options by:
    1. Splitting the paths across workers, each with its own random stream
    2. Simulating terminal prices (or full paths) under the risk-neutral measure
    3. Accumulating discounted payoffs and their squares per worker
    4. Combining the worker totals into a price and standard error

    Args:
        n_workers: Number of parallel workers (default: CPU count)
        batch_size: Paths per vectorised batch inside a worker
        seed: Root seed; fixed seed, worker count and batch size reproduce
            results exactly. None gives a fresh, non-deterministic run.
        backend: "thread", "process" or "sequential"
        config: Base configuration (default: EngineConfig.from_env())
    """

    def __init__(
        self,
        n_workers: Optional[int] = None,
        batch_size: Optional[int] = None,
        seed: Optional[int] = None,
        backend: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ):
        base = config if config is not None else EngineConfig.from_env()
        self.config = base.with_overrides(
            n_workers=n_workers, batch_size=batch_size, seed=seed, backend=backend
        )

    def price(self, request: PricingRequest) -> PricingResult:
        """
        Price a European option using Monte Carlo simulation.

        Args:
            request: Validated pricing request

        Returns:
            PricingResult containing price, standard error and 95% interval
        """
        raise_for_failures(request.failures())
        start = time.perf_counter()

        n_samples = request.n_paths // 2 if request.antithetic else request.n_paths
        shares = partition_paths(n_samples, self.config.n_workers)
        seed_seq = root_seed_sequence(self.config.seed)
        tasks = [
            _WorkerTask(
                worker_id=i,
                n_samples=share,
                seed_seq=child,
                request=request,
                batch_size=self.config.batch_size,
            )
            for i, (share, child) in enumerate(zip(shares, seed_seq.spawn(len(shares))))
        ]

        totals = AccumulatedStatistics.combine(self._run(tasks))
        n_paths = 2 * totals.count if request.antithetic else totals.count
        elapsed = time.perf_counter() - start
        result = PricingResult.from_statistics(totals, n_paths, elapsed)

        logger.info(
            "%s: %d paths on %d %s worker(s), price=%.6f se=%.6f (%.3fs, entropy=%s)",
            request.option_type.value,
            n_paths,
            len(tasks),
            self.config.backend,
            result.price,
            result.standard_error,
            elapsed,
            seed_seq.entropy,
        )
        return result

    def price_call_and_put(
        self,
        params: SimulationParameters,
        strike: float,
        r: float,
        n_paths: int,
        **kwargs,
    ) -> tuple[PricingResult, PricingResult]:
        """Price the call and the put on the same parameters."""
        results = []
        for option_type in (OptionType.CALL, OptionType.PUT):
            request = PricingRequest(
                params=params,
                strike=strike,
                option_type=option_type,
                n_paths=n_paths,
                r=r,
                **kwargs,
            )
            results.append(self.price(request))
        return results[0], results[1]

    def compare(self, request: PricingRequest) -> PricingComparison:
        """Price ``request`` and pair it with the Black-Scholes price."""
        result = self.price(request)
        reference = bs_price(
            request.params.s0,
            request.strike,
            request.r,
            request.params.sigma,
            request.params.t,
            request.option_type,
        )
        return PricingComparison(result=result, reference_price=reference)

    def _run(self, tasks: list[_WorkerTask]) -> list[AccumulatedStatistics]:
        # Results are collected in task order so the reduction is reproducible.
        if len(tasks) == 1 or self.config.backend == "sequential":
            return [_simulate_share(task) for task in tasks]
        if self.config.backend == "process":
            with ProcessPoolExecutor(
                max_workers=len(tasks), mp_context=mp.get_context("spawn")
            ) as ex:
                return list(ex.map(_simulate_share, tasks))
        with ThreadPoolExecutor(max_workers=len(tasks)) as ex:
            return list(ex.map(_simulate_share, tasks))


def monte_carlo_price(
    s0: float,
    strike: float,
    r: float,
    sigma: float,
    t: float,
    steps: int,
    n_paths: int,
    option_type: Union[str, OptionType] = OptionType.CALL,
    *,
    seed: Optional[int] = None,
    n_workers: Optional[int] = None,
    antithetic: bool = False,
    path_mode: PathMode = PathMode.TERMINAL,
) -> PricingResult:
    """
    Price a European option from scalar inputs.

    All inputs are validated before any random draw; an invalid field
    raises its named ParameterValidationError subclass.
    """
    request = PricingRequest.from_scalars(
        s0,
        strike,
        r,
        sigma,
        t,
        steps,
        n_paths,
        option_type,
        antithetic=antithetic,
        path_mode=path_mode,
    )
    engine = MonteCarloEngine(n_workers=n_workers, seed=seed)
    return engine.price(request)
