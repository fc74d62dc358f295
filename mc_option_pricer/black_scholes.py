"""
Closed-form Black-Scholes prices and Greeks for European options.

Used as the analytical reference for the Monte Carlo engine. The normal
CDF comes from ``scipy.stats.norm`` (error-function based).
"""

import math
from dataclasses import dataclass
from typing import Union

from scipy.stats import norm

from .payoffs import OptionType
from .validation import check_market_inputs, raise_for_failures


@dataclass(frozen=True)
class Greeks:
    """
    Black-Scholes sensitivities, annualised and per unit change.

    Attributes:
        delta: dV/dS
        gamma: d2V/dS2
        theta: dV/dt (per year, calendar time passing)
        vega: dV/dsigma (per 1.00 of volatility)
        rho: dV/dr (per 1.00 of rate)
    """

    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    @property
    def per_day_theta(self) -> float:
        return self.theta / 365.0

    @property
    def per_pct_vega(self) -> float:
        return self.vega / 100.0

    @property
    def per_pct_rho(self) -> float:
        return self.rho / 100.0


def norm_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(norm.cdf(x))


def d1_d2(s0: float, k: float, r: float, sigma: float, t: float) -> tuple[float, float]:
    """
    d1 = [ln(S0/K) + (r + σ²/2)T] / (σ√T), d2 = d1 - σ√T

    Requires sigma > 0.
    """
    sqrt_t = math.sqrt(t)
    d1 = (math.log(s0 / k) + (r + 0.5 * sigma**2) * t) / (sigma * sqrt_t)
    return d1, d1 - sigma * sqrt_t


def bs_call(s0: float, k: float, r: float, sigma: float, t: float) -> float:
    """
    Black-Scholes price of a European call.

    C = S0 N(d1) - K e^(-rT) N(d2). With zero volatility the price is the
    discounted intrinsic value max(S0 - K e^(-rT), 0).
    """
    raise_for_failures(check_market_inputs(s0, k, sigma, t))
    discounted_strike = k * math.exp(-r * t)
    if sigma == 0:
        return max(s0 - discounted_strike, 0.0)

    d1, d2 = d1_d2(s0, k, r, sigma, t)
    return s0 * norm_cdf(d1) - discounted_strike * norm_cdf(d2)


def bs_put(s0: float, k: float, r: float, sigma: float, t: float) -> float:
    """
    Black-Scholes price of a European put.

    P = K e^(-rT) N(-d2) - S0 N(-d1). With zero volatility the price is
    max(K e^(-rT) - S0, 0).
    """
    raise_for_failures(check_market_inputs(s0, k, sigma, t))
    discounted_strike = k * math.exp(-r * t)
    if sigma == 0:
        return max(discounted_strike - s0, 0.0)

    d1, d2 = d1_d2(s0, k, r, sigma, t)
    return discounted_strike * norm_cdf(-d2) - s0 * norm_cdf(-d1)


def bs_price(
    s0: float,
    k: float,
    r: float,
    sigma: float,
    t: float,
    option_type: Union[str, OptionType] = OptionType.CALL,
) -> float:
    """Black-Scholes price for either option type."""
    if OptionType.parse(option_type) is OptionType.CALL:
        return bs_call(s0, k, r, sigma, t)
    return bs_put(s0, k, r, sigma, t)


def bs_greeks(
    s0: float,
    k: float,
    r: float,
    sigma: float,
    t: float,
    option_type: Union[str, OptionType] = OptionType.CALL,
) -> Greeks:
    """
    Closed-form Black-Scholes Greeks.

    For sigma = 0 the option is a deterministic forward-or-nothing and the
    limiting values are returned: delta is the in-the-money indicator
    (signed for puts), gamma and vega are zero, theta and rho come from the
    discounted strike leg when the option finishes in the money.
    """
    raise_for_failures(check_market_inputs(s0, k, sigma, t))
    option_type = OptionType.parse(option_type)
    is_call = option_type is OptionType.CALL
    discounted_strike = k * math.exp(-r * t)

    if sigma == 0:
        in_the_money = s0 > discounted_strike if is_call else discounted_strike > s0
        if not in_the_money:
            return Greeks(delta=0.0, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)
        sign = 1.0 if is_call else -1.0
        return Greeks(
            delta=sign,
            gamma=0.0,
            theta=-sign * r * discounted_strike,
            vega=0.0,
            rho=sign * t * discounted_strike,
        )

    sqrt_t = math.sqrt(t)
    d1, d2 = d1_d2(s0, k, r, sigma, t)
    pdf_d1 = float(norm.pdf(d1))

    gamma = pdf_d1 / (s0 * sigma * sqrt_t)
    vega = s0 * pdf_d1 * sqrt_t
    decay = -(s0 * pdf_d1 * sigma) / (2 * sqrt_t)

    if is_call:
        delta = norm_cdf(d1)
        theta = decay - r * discounted_strike * norm_cdf(d2)
        rho = t * discounted_strike * norm_cdf(d2)
    else:
        delta = norm_cdf(d1) - 1.0
        theta = decay + r * discounted_strike * norm_cdf(-d2)
        rho = -t * discounted_strike * norm_cdf(-d2)

    return Greeks(delta=delta, gamma=gamma, theta=theta, vega=vega, rho=rho)
