"""Unit tests for the Monte Carlo pricing engine."""

import math

import numpy as np
import pytest

from mc_option_pricer import pricing
from mc_option_pricer.black_scholes import bs_call, bs_put
from mc_option_pricer.config import EngineConfig
from mc_option_pricer.errors import (
    InvalidMaturityError,
    InvalidPathCountError,
    InvalidSpotPriceError,
    InvalidStepCountError,
    InvalidStrikeError,
    NegativeRateError,
    NegativeVolatilityError,
    ParameterValidationError,
)
from mc_option_pricer.gbm import PathMode, SimulationParameters
from mc_option_pricer.payoffs import OptionType
from mc_option_pricer.pricing import (
    MonteCarloEngine,
    PricingComparison,
    PricingRequest,
    PricingResult,
    monte_carlo_price,
    partition_paths,
)

S0, K, R, SIGMA, T = 100.0, 100.0, 0.05, 0.2, 1.0


def _request(n_paths=100_000, option_type=OptionType.CALL, strike=K, sigma=SIGMA, **kwargs):
    params = SimulationParameters(s0=S0, sigma=sigma, t=T, steps=kwargs.pop("steps", 1))
    return PricingRequest(
        params=params,
        strike=strike,
        option_type=option_type,
        n_paths=n_paths,
        r=R,
        **kwargs,
    )


class TestPricingResult:
    """Tests for PricingResult dataclass."""

    def test_str_format(self):
        result = PricingResult(
            price=10.5,
            standard_error=0.1,
            n_paths=10000,
            confidence_interval_95=(10.3, 10.7),
        )
        result_str = str(result)
        assert "10.500000" in result_str
        assert "0.100000" in result_str
        assert "10.300000" in result_str
        assert "10.700000" in result_str


class TestPricingRequest:
    """Tests for request construction and validation."""

    def test_from_scalars(self):
        request = PricingRequest.from_scalars(100, 95, 0.05, 0.2, 1.0, 10, 1000, "put")
        assert request.params == SimulationParameters(s0=100, sigma=0.2, t=1.0, steps=10)
        assert request.option_type is OptionType.PUT
        assert not request.is_call
        assert request.discount_factor == pytest.approx(math.exp(-0.05))

    def test_option_type_string_parsed(self):
        assert _request(option_type="call").is_call

    @pytest.mark.parametrize(
        "overrides, error",
        [
            ({"strike": -1}, InvalidStrikeError),
            ({"n_paths": 0}, InvalidPathCountError),
        ],
    )
    def test_invalid_request(self, overrides, error):
        with pytest.raises(error):
            _request(**overrides)


class TestPartitionPaths:
    """Tests for static work partitioning."""

    def test_even_split(self):
        assert partition_paths(100, 4) == [25, 25, 25, 25]

    def test_last_worker_absorbs_remainder(self):
        assert partition_paths(10, 3) == [3, 3, 4]

    def test_fewer_paths_than_workers(self):
        assert partition_paths(3, 8) == [1, 1, 1]

    def test_shares_cover_all_paths(self):
        for n_paths in (1, 7, 1000, 999_983):
            for n_workers in (1, 2, 3, 16):
                shares = partition_paths(n_paths, n_workers)
                assert sum(shares) == n_paths
                assert min(shares) >= 1

    def test_invalid(self):
        with pytest.raises(ValueError):
            partition_paths(0, 4)
        with pytest.raises(ValueError):
            partition_paths(10, 0)


class TestMonteCarloEngine:
    """Tests for MonteCarloEngine class."""

    @pytest.fixture
    def engine(self):
        return MonteCarloEngine(n_workers=4, seed=42)

    def test_call_price_matches_black_scholes(self, engine):
        """Monte Carlo call price should converge to Black-Scholes."""
        result = engine.price(_request(strike=105))
        bs_price = bs_call(S0, 105, R, SIGMA, T)

        # Price should be within 3 standard errors of BS price
        assert abs(result.price - bs_price) < 3 * result.standard_error

    def test_put_price_matches_black_scholes(self, engine):
        result = engine.price(_request(strike=105, option_type=OptionType.PUT))
        bs_price = bs_put(S0, 105, R, SIGMA, T)
        assert abs(result.price - bs_price) < 3 * result.standard_error

    def test_put_call_parity(self, engine):
        """Monte Carlo prices should satisfy put-call parity."""
        params = SimulationParameters(s0=S0, sigma=SIGMA, t=T)
        call_result, put_result = engine.price_call_and_put(params, 105, R, 100_000)

        lhs = call_result.price - put_result.price
        rhs = S0 - 105 * np.exp(-R * T)

        combined_error = np.sqrt(call_result.standard_error**2 + put_result.standard_error**2)
        assert abs(lhs - rhs) < 3 * combined_error

    def test_confidence_interval_width(self, engine):
        """CI width should be 2 * 1.96 * standard_error."""
        result = engine.price(_request(n_paths=10_000))
        low, high = result.confidence_interval_95
        assert low <= result.price <= high
        assert abs((high - low) - 2 * 1.96 * result.standard_error) < 1e-10

    def test_result_metadata(self, engine):
        result = engine.price(_request(n_paths=12_345))
        assert result.n_paths == 12_345
        assert result.execution_time > 0

    def test_more_paths_reduces_error(self, engine):
        result_few = engine.price(_request(n_paths=10_000))
        result_many = engine.price(_request(n_paths=100_000))
        assert result_many.standard_error < result_few.standard_error

    def test_deep_otm_call_prices_near_zero(self, engine):
        result = engine.price(_request(strike=400, n_paths=10_000))
        assert 0 <= result.price < 1e-3

    def test_short_maturity_intrinsic_value(self, engine):
        """Close to expiry the price approaches the intrinsic value."""
        params = SimulationParameters(s0=S0, sigma=SIGMA, t=0.001)
        request = PricingRequest(
            params=params, strike=90, option_type=OptionType.CALL, n_paths=10_000, r=R
        )
        assert abs(engine.price(request).price - 10) < 1

    def test_compare(self, engine):
        comparison = engine.compare(_request())
        assert isinstance(comparison, PricingComparison)
        assert comparison.reference_price == pytest.approx(bs_call(S0, K, R, SIGMA, T))
        assert comparison.absolute_error == pytest.approx(
            abs(comparison.result.price - comparison.reference_price)
        )
        assert comparison.relative_error < 0.02
        assert comparison.error_in_standard_errors < 4


class TestDeterminism:
    """Seeded runs are reproducible; seedless runs are not."""

    def test_same_seed_identical(self):
        first = MonteCarloEngine(n_workers=4, seed=7).price(_request(n_paths=50_000))
        second = MonteCarloEngine(n_workers=4, seed=7).price(_request(n_paths=50_000))
        assert first.price == second.price
        assert first.standard_error == second.standard_error

    def test_different_seeds_differ(self):
        first = MonteCarloEngine(n_workers=4, seed=7).price(_request(n_paths=50_000))
        second = MonteCarloEngine(n_workers=4, seed=8).price(_request(n_paths=50_000))
        assert first.price != second.price

    def test_unseeded_runs_differ(self):
        engine = MonteCarloEngine(n_workers=2)
        assert engine.price(_request(n_paths=10_000)).price != engine.price(
            _request(n_paths=10_000)
        ).price

    def test_sequential_backend_matches_threads(self):
        threaded = MonteCarloEngine(n_workers=3, seed=11, backend="thread")
        sequential = MonteCarloEngine(n_workers=3, seed=11, backend="sequential")
        request = _request(n_paths=30_001)
        assert threaded.price(request).price == sequential.price(request).price

    def test_process_backend_matches_threads(self):
        threaded = MonteCarloEngine(n_workers=2, seed=5, backend="thread")
        processes = MonteCarloEngine(n_workers=2, seed=5, backend="process")
        request = _request(n_paths=4_000)
        assert processes.price(request).price == threaded.price(request).price

    def test_batch_size_does_not_change_draws(self):
        request = _request(n_paths=20_000)
        small = MonteCarloEngine(n_workers=2, seed=3, batch_size=999).price(request)
        large = MonteCarloEngine(n_workers=2, seed=3, batch_size=100_000).price(request)
        assert small.price == pytest.approx(large.price, rel=1e-12)
        assert small.standard_error == pytest.approx(large.standard_error, rel=1e-9)

    def test_worker_count_is_statistically_irrelevant(self):
        one = MonteCarloEngine(n_workers=1, seed=1).price(_request())
        many = MonteCarloEngine(n_workers=8, seed=1).price(_request())
        combined = math.hypot(one.standard_error, many.standard_error)
        assert abs(one.price - many.price) < 4 * combined


class TestErrorScaling:
    """Standard error scales as 1/sqrt(n_paths)."""

    N_PATHS = (10_000, 100_000, 1_000_000)

    @pytest.fixture(scope="class")
    def results(self):
        engine = MonteCarloEngine(config=EngineConfig(n_workers=4, seed=2024))
        return [engine.price(_request(n_paths=n)) for n in self.N_PATHS]

    def test_standard_error_ratio(self, results):
        for (n_a, a), (n_b, b) in zip(
            zip(self.N_PATHS, results), zip(self.N_PATHS[1:], results[1:])
        ):
            expected = math.sqrt(n_a / n_b)
            ratio = b.standard_error / a.standard_error
            assert abs(ratio - expected) / expected < 0.10

    def test_implied_variance_invariant(self, results):
        implied = [r.standard_error**2 * n for r, n in zip(results, self.N_PATHS)]
        reference = implied[-1]
        for value in implied:
            assert abs(value - reference) / reference < 0.20


class TestZeroVolatility:
    """With sigma = 0 the payoff is deterministic."""

    @pytest.mark.parametrize("option_type, s0", [(OptionType.CALL, 100.0), (OptionType.PUT, 90.0)])
    def test_matches_discounted_intrinsic(self, option_type, s0):
        params = SimulationParameters(s0=s0, sigma=0.0, t=T)
        request = PricingRequest(
            params=params, strike=K, option_type=option_type, n_paths=10_000, r=R
        )
        result = MonteCarloEngine(n_workers=4, seed=1).price(request)

        if option_type is OptionType.CALL:
            expected = bs_call(s0, K, R, 0.0, T)
        else:
            expected = bs_put(s0, K, R, 0.0, T)
        assert result.price == pytest.approx(expected, rel=1e-12)
        assert result.standard_error == 0.0
        assert result.confidence_interval_95 == (result.price, result.price)

    def test_out_of_the_money_is_zero(self):
        params = SimulationParameters(s0=80, sigma=0.0, t=T)
        request = PricingRequest(
            params=params, strike=K, option_type=OptionType.CALL, n_paths=1_000, r=R
        )
        result = MonteCarloEngine(n_workers=2, seed=1).price(request)
        assert result.price == 0.0
        assert result.standard_error == 0.0


class TestAntitheticVariates:
    """Tests for antithetic variate variance reduction."""

    @pytest.fixture
    def engine(self):
        return MonteCarloEngine(n_workers=4, seed=42)

    def test_antithetic_price_matches_black_scholes(self, engine):
        result = engine.price(_request(strike=105, antithetic=True))
        assert abs(result.price - bs_call(S0, 105, R, SIGMA, T)) < 3 * result.standard_error

    def test_antithetic_reduces_variance(self, engine):
        """Antithetic variates should reduce standard error."""
        result_standard = engine.price(_request(n_paths=50_000))
        result_antithetic = engine.price(_request(n_paths=50_000, antithetic=True))
        assert result_antithetic.standard_error < result_standard.standard_error

    def test_antithetic_n_paths(self, engine):
        assert engine.price(_request(n_paths=2000, antithetic=True)).n_paths == 2000
        assert engine.price(_request(n_paths=2, antithetic=True)).n_paths == 2

    @pytest.mark.parametrize("n_paths", [1, 2001])
    def test_odd_path_count_rejected(self, n_paths):
        with pytest.raises(InvalidPathCountError, match="even"):
            _request(n_paths=n_paths, antithetic=True)

    def test_zero_volatility_pairs_have_zero_error(self, engine):
        result = engine.price(_request(n_paths=10_000, sigma=0.0, antithetic=True))
        assert result.price == pytest.approx(bs_call(S0, K, R, 0.0, T), rel=1e-12)
        assert result.standard_error == 0.0


class TestDiscretizedPaths:
    """Pricing from step-wise simulated paths."""

    def test_matches_black_scholes(self):
        engine = MonteCarloEngine(n_workers=4, seed=99)
        result = engine.price(
            _request(n_paths=40_000, steps=50, path_mode=PathMode.DISCRETIZED)
        )
        assert abs(result.price - bs_call(S0, K, R, SIGMA, T)) < 4 * result.standard_error

    def test_single_step_equals_terminal_mode(self):
        engine = MonteCarloEngine(n_workers=2, seed=4)
        terminal = engine.price(_request(n_paths=10_000))
        discretized = engine.price(_request(n_paths=10_000, path_mode=PathMode.DISCRETIZED))
        assert discretized.price == pytest.approx(terminal.price, rel=1e-9)


class TestValidationBeforeSimulation:
    """Every invalid field raises its named error before any work."""

    @pytest.fixture(autouse=True)
    def _no_simulation(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("simulation must not start")

        monkeypatch.setattr(pricing, "_simulate_share", fail)
        monkeypatch.setattr(pricing, "NormalStream", fail)

    @pytest.mark.parametrize(
        "overrides, error, field",
        [
            ({"s0": 0}, InvalidSpotPriceError, "s0"),
            ({"strike": -1}, InvalidStrikeError, "strike"),
            ({"sigma": -0.1}, NegativeVolatilityError, "sigma"),
            ({"t": 0}, InvalidMaturityError, "t"),
            ({"steps": 0}, InvalidStepCountError, "steps"),
            ({"n_paths": 0}, InvalidPathCountError, "n_paths"),
            ({"r": -0.01}, NegativeRateError, "r"),
        ],
    )
    def test_named_failure(self, overrides, error, field):
        kwargs = dict(s0=S0, strike=K, r=R, sigma=SIGMA, t=T, steps=1, n_paths=1000)
        kwargs.update(overrides)
        with pytest.raises(error) as excinfo:
            monte_carlo_price(**kwargs, seed=1)
        assert isinstance(excinfo.value, ParameterValidationError)
        assert excinfo.value.field == field
        assert field in str(excinfo.value)

    def test_odd_antithetic_path_count(self):
        with pytest.raises(InvalidPathCountError) as excinfo:
            monte_carlo_price(S0, K, R, SIGMA, T, 1, 2001, seed=1, antithetic=True)
        assert excinfo.value.value == 2001


@pytest.mark.slow
class TestConvergence:
    """MC converges to Black-Scholes within 1% at 10 million paths."""

    @pytest.mark.parametrize(
        "option_type, reference",
        [(OptionType.CALL, bs_call), (OptionType.PUT, bs_put)],
    )
    def test_ten_million_paths(self, option_type, reference):
        result = monte_carlo_price(
            S0, K, R, SIGMA, T, 252, 10_000_000, option_type, seed=123, n_workers=4
        )
        expected = reference(S0, K, R, SIGMA, T)
        assert abs(result.price - expected) / expected < 0.01
