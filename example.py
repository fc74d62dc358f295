#!/usr/bin/env python3
"""
Example usage of the Monte Carlo option pricer.

Prices a European call and put with the parallel Monte Carlo engine,
compares them with the Black-Scholes prices and times the multi-worker
run against a single worker.
"""

import logging

import numpy as np

from mc_option_pricer import (
    GBMSimulator,
    MonteCarloEngine,
    NormalStream,
    OptionType,
    PricingRequest,
    SimulationParameters,
    bs_call,
    bs_greeks,
    bs_put,
)


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    # Market parameters
    s0 = 100.0  # Initial stock price
    k = 100.0  # Strike price
    t = 1.0  # Time to maturity (1 year)
    r = 0.05  # Risk-free rate (5%)
    sigma = 0.2  # Volatility (20%)
    steps = 252  # Daily steps, used only by the discretized path mode
    n_paths = 1_000_000

    print("=" * 60)
    print("Monte Carlo Option Pricing")
    print("=" * 60)
    print("\nParameters:")
    print(f"  Initial price (S0): ${s0:.2f}")
    print(f"  Strike price (K):   ${k:.2f}")
    print(f"  Time to maturity:   {t:.2f} years")
    print(f"  Risk-free rate:     {r:.1%}")
    print(f"  Volatility:         {sigma:.1%}")
    print(f"  Monte Carlo paths:  {n_paths:,}")

    params = SimulationParameters(s0=s0, sigma=sigma, t=t, steps=steps)
    engine = MonteCarloEngine(seed=42)
    print(f"  Workers:            {engine.config.n_workers} ({engine.config.backend})")

    print("\nRandom normal samples:")
    stream = NormalStream(42)
    for i in range(5):
        print(f"  Sample {i + 1}: {stream.next_standard_normal():.6f}")

    call_result, put_result = engine.price_call_and_put(params, k, r, n_paths)
    references = {
        OptionType.CALL: bs_call(s0, k, r, sigma, t),
        OptionType.PUT: bs_put(s0, k, r, sigma, t),
    }

    for option_type, result in ((OptionType.CALL, call_result), (OptionType.PUT, put_result)):
        reference = references[option_type]
        print("\n" + "-" * 60)
        print(f"European {option_type.value.title()} Option")
        print("-" * 60)
        print(f"  Monte Carlo:   {result}")
        print(f"  Black-Scholes: {reference:.6f}")
        print(f"  Error:         {abs(result.price - reference) / reference:.4%}")
        print(f"  Runtime:       {result.execution_time * 1000:.0f} ms")

    # Antithetic sampling on the call
    request = PricingRequest(
        params=params,
        strike=k,
        option_type=OptionType.CALL,
        n_paths=n_paths,
        r=r,
        antithetic=True,
    )
    call_result_av = engine.price(request)
    print(f"\n  With Antithetic Variates: {call_result_av}")
    print(f"  Variance reduction: {call_result.standard_error / call_result_av.standard_error:.2f}x")

    # Verify put-call parity: C - P = S0 - K*exp(-rT)
    print("\n" + "-" * 60)
    print("Put-Call Parity Check")
    print("-" * 60)
    parity_lhs = call_result.price - put_result.price
    parity_rhs = s0 - k * np.exp(-r * t)
    print(f"  C - P = {parity_lhs:.6f}")
    print(f"  S0 - K*exp(-rT) = {parity_rhs:.6f}")
    print(f"  Difference: {abs(parity_lhs - parity_rhs):.6f}")

    # Multi-worker speedup over a single worker
    print("\n" + "-" * 60)
    print("Parallel Speedup")
    print("-" * 60)
    single = MonteCarloEngine(n_workers=1, seed=42).price_call_and_put(params, k, r, n_paths)
    multi_time = call_result.execution_time + put_result.execution_time
    single_time = single[0].execution_time + single[1].execution_time
    print(f"  Multi-worker runtime:  {multi_time * 1000:.0f} ms")
    print(f"  Single-worker runtime: {single_time * 1000:.0f} ms")
    print(f"  Speedup: {single_time / multi_time:.2f}x")

    # Greeks from the closed form
    print("\n" + "-" * 60)
    print("Black-Scholes Greeks (call)")
    print("-" * 60)
    greeks = bs_greeks(s0, k, r, sigma, t, OptionType.CALL)
    print(f"  Delta: {greeks.delta:.4f}")
    print(f"  Gamma: {greeks.gamma:.4f}")
    print(f"  Theta: {greeks.per_day_theta:.4f} per day")
    print(f"  Vega:  {greeks.per_pct_vega:.4f} per 1% vol")
    print(f"  Rho:   {greeks.per_pct_rho:.4f} per 1% rate")

    # Demonstrate path simulation
    print("\n" + "-" * 60)
    print("Path Simulation Example")
    print("-" * 60)

    monthly = SimulationParameters(s0=s0, sigma=sigma, t=t, steps=12)
    small_sim = GBMSimulator(monthly, r, NormalStream(123))
    paths = small_sim.simulate_paths(5)
    time_grid = small_sim.get_time_grid()

    print(f"  Simulated {paths.shape[0]} paths with {paths.shape[1]} time points")
    print(f"  Time grid (monthly): {time_grid.round(2)}")
    print(f"  Sample path (first): {paths[0].round(2)}")

    print("\n" + "=" * 60)
    print("Simulation complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
