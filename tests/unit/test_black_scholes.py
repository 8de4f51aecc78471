"""
Unit tests for Black-Scholes pricing and Greeks calculations.

This module validates:
1. Known analytical solutions from textbooks
2. Agreement with a closed-form reference built on scipy's normal CDF
3. Put-call parity relationship
4. Input validation (expired options, zero volatility, bad prices)
5. Greeks accuracy via finite-difference comparison, in dashboard units
"""

import math

import pytest
from scipy.stats import norm

from options_analytics.core.black_scholes import (
    d1,
    d2,
    delta,
    gamma,
    option_price,
    price_and_greeks,
    rho,
    theta,
    vega,
)
from options_analytics.utils.errors import InvalidInputError


def reference_price(S, K, t, r, sigma, option_type):
    """Closed-form Black-Scholes using scipy's exact normal CDF."""
    d1_value = (math.log(S / K) + (r + 0.5 * sigma ** 2) * t) / (sigma * math.sqrt(t))
    d2_value = d1_value - sigma * math.sqrt(t)
    if option_type == "call":
        return S * norm.cdf(d1_value) - K * math.exp(-r * t) * norm.cdf(d2_value)
    return K * math.exp(-r * t) * norm.cdf(-d2_value) - S * norm.cdf(-d1_value)


# ===========================
# Known Solutions Tests
# ===========================


def test_atm_call_known_solution(standard_params):
    """
    Hull, "Options, Futures, and Other Derivatives":
    S=100, K=100, T=1 (365 days), r=5%, σ=20% → Call ≈ 10.4506
    """
    result = price_and_greeks("call", **standard_params)
    assert abs(result.price - 10.4506) < 0.01, f"Expected ~10.4506, got {result.price}"


def test_atm_put_known_solution(standard_params):
    """S=100, K=100, T=1, r=5%, σ=20% → Put ≈ 5.5735"""
    result = price_and_greeks("put", **standard_params)
    assert abs(result.price - 5.5735) < 0.01, f"Expected ~5.5735, got {result.price}"


def test_itm_call_known_solution():
    """S=120, K=100, T=0.5, r=5%, σ=20% → Call ≈ 22.95"""
    price = option_price(S=120, K=100, t=0.5, r=0.05, sigma=0.20, option_type="call")
    assert 22.5 < price < 23.5, f"Expected ~22.95, got {price}"


def test_otm_put_known_solution():
    """S=120, K=100, T=0.5, r=5%, σ=20% → Put ≈ 0.48"""
    price = option_price(S=120, K=100, t=0.5, r=0.05, sigma=0.20, option_type="put")
    assert 0.3 < price < 0.7, f"Expected ~0.48, got {price}"


@pytest.mark.parametrize(
    "S,K,t,r,sigma",
    [
        (100, 100, 1.0, 0.05, 0.20),  # ATM
        (110, 100, 1.0, 0.05, 0.20),  # ITM call
        (90, 100, 1.0, 0.05, 0.20),  # OTM call
        (193.28, 190, 30 / 365, 0.05, 0.30),  # Short-dated, dashboard defaults
        (100, 100, 2.0, 0.03, 0.15),  # Long expiry
    ],
)
@pytest.mark.parametrize("option_type", ["call", "put"])
def test_matches_exact_normal_reference(S, K, t, r, sigma, option_type):
    """The polynomial N(x) keeps prices within 1e-4 of the exact formula."""
    price = option_price(S, K, t, r, sigma, option_type)
    assert abs(price - reference_price(S, K, t, r, sigma, option_type)) < 1e-4


# ===========================
# Put-Call Parity Tests
# ===========================


@pytest.mark.parametrize(
    "S,K,t,r,sigma",
    [
        (100, 100, 1.0, 0.05, 0.20),
        (110, 100, 1.0, 0.05, 0.20),
        (90, 100, 1.0, 0.05, 0.20),
        (100, 100, 0.25, 0.05, 0.30),
        (100, 100, 2.0, 0.03, 0.15),
    ],
)
def test_put_call_parity(S, K, t, r, sigma):
    """C - P = S - K·e^(-rt)"""
    lhs = option_price(S, K, t, r, sigma, "call") - option_price(S, K, t, r, sigma, "put")
    rhs = S - K * math.exp(-r * t)
    assert abs(lhs - rhs) < 1e-5


# ===========================
# d1 and d2 Tests
# ===========================


def test_d1_d2_relationship():
    """Verify d2 = d1 - σ√t."""
    d1_val = d1(100, 100, 1.0, 0.05, 0.20)
    d2_val = d2(100, 100, 1.0, 0.05, 0.20)
    assert abs(d2_val - (d1_val - 0.20)) < 1e-12


def test_d1_sign_follows_moneyness():
    assert d1(S=120, K=100, t=1.0, r=0.05, sigma=0.20) > 0
    assert d1(S=80, K=100, t=1.0, r=0.05, sigma=0.20) < 0


# ===========================
# Input Validation Tests
# ===========================


@pytest.mark.parametrize("days", [0, -1])
def test_expired_option_raises(days):
    """Greeks are undefined at or after expiry."""
    with pytest.raises(InvalidInputError):
        price_and_greeks("call", 100, 100, 20, days)


def test_zero_volatility_raises():
    with pytest.raises(InvalidInputError):
        price_and_greeks("call", 100, 100, 0, 30)


@pytest.mark.parametrize(
    "S,K",
    [(-100, 100), (0, 100), (100, -100), (100, 0), (float("nan"), 100), (100, float("inf"))],
)
def test_invalid_prices_raise(S, K):
    with pytest.raises(InvalidInputError):
        price_and_greeks("put", S, K, 20, 30)


def test_invalid_option_type_raises():
    with pytest.raises(InvalidInputError):
        price_and_greeks("straddle", 100, 100, 20, 30)


def test_invalid_input_error_is_value_error():
    with pytest.raises(ValueError):
        option_price(S=100, K=100, t=-1.0, r=0.05, sigma=0.20)


# ===========================
# Greeks Tests
# ===========================


def test_aapl_long_call_greeks():
    """AAPL at 193.28, 190 call, 30% vol, 30 days."""
    result = price_and_greeks("call", 193.28, 190, 30, 30)

    assert 0.0 < result.delta < 1.0
    assert result.gamma > 0.0
    assert result.theta < 0.0
    assert result.vega > 0.0
    assert result.rho > 0.0
    assert result.price > 193.28 - 190


def test_put_delta_range(standard_params):
    result = price_and_greeks("put", **standard_params)
    assert -1.0 <= result.delta <= 0.0
    assert result.rho < 0.0


def test_call_and_put_share_gamma_and_vega(standard_params):
    call = price_and_greeks("call", **standard_params)
    put = price_and_greeks("put", **standard_params)

    assert abs(call.gamma - put.gamma) < 1e-12
    assert abs(call.vega - put.vega) < 1e-12
    assert abs((call.delta - put.delta) - 1.0) < 1e-12


def test_primitives_agree_with_price_and_greeks():
    S, K, t, r, sigma = 193.28, 190.0, 30 / 365, 0.05, 0.30
    result = price_and_greeks("put", S, K, 30, 30, r)

    assert abs(result.price - option_price(S, K, t, r, sigma, "put")) < 1e-12
    assert abs(result.delta - delta(S, K, t, r, sigma, "put")) < 1e-12
    assert abs(result.gamma - gamma(S, K, t, r, sigma)) < 1e-12
    assert abs(result.theta - theta(S, K, t, r, sigma, "put")) < 1e-12
    assert abs(result.vega - vega(S, K, t, r, sigma)) < 1e-12
    assert abs(result.rho - rho(S, K, t, r, sigma, "put")) < 1e-12


# ===========================
# Greeks Finite-Difference Validation
# ===========================


def test_delta_finite_difference_call():
    h = 0.01
    analytical = delta(100, 100, 1.0, 0.05, 0.20, "call")
    numerical = (
        option_price(100 + h, 100, 1.0, 0.05, 0.20) - option_price(100 - h, 100, 1.0, 0.05, 0.20)
    ) / (2 * h)
    assert abs(analytical - numerical) < 1e-3


def test_gamma_finite_difference():
    h = 0.5
    analytical = gamma(100, 100, 1.0, 0.05, 0.20)
    up = option_price(100 + h, 100, 1.0, 0.05, 0.20)
    mid = option_price(100, 100, 1.0, 0.05, 0.20)
    down = option_price(100 - h, 100, 1.0, 0.05, 0.20)
    assert abs(analytical - (up - 2 * mid + down) / (h * h)) < 1e-3


def test_vega_finite_difference_per_point():
    """Vega is per 1 point of volatility, so it matches P(σ + 1%) - P(σ)."""
    h = 0.001
    analytical = vega(100, 100, 1.0, 0.05, 0.20)
    numerical = (
        option_price(100, 100, 1.0, 0.05, 0.20 + h) - option_price(100, 100, 1.0, 0.05, 0.20 - h)
    ) / (2 * h) / 100.0
    assert abs(analytical - numerical) < 1e-3


def test_theta_finite_difference_per_day():
    """Theta is the one-day change in value as time to expiry shrinks."""
    one_day = 1.0 / 365.0
    analytical = theta(100, 100, 1.0, 0.05, 0.20, "call")
    numerical = option_price(100, 100, 1.0 - one_day, 0.05, 0.20) - option_price(100, 100, 1.0, 0.05, 0.20)
    assert abs(analytical - numerical) < 1e-3


def test_rho_finite_difference_per_point():
    h = 0.0001
    analytical = rho(100, 100, 1.0, 0.05, 0.20, "put")
    numerical = (
        option_price(100, 100, 1.0, 0.05 + h, 0.20, "put") - option_price(100, 100, 1.0, 0.05 - h, 0.20, "put")
    ) / (2 * h) / 100.0
    assert abs(analytical - numerical) < 1e-3
