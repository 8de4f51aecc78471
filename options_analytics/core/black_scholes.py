"""
Black-Scholes option pricing and Greeks for a single contract.

This module implements the Black-Scholes formula for European options
without dividends, together with the five standard Greeks as the
trading dashboard reports them: theta per calendar day, vega per one
point of volatility and rho per one point of interest rate.

Mathematical Background:
    The Black-Scholes formula prices European options under assumptions:
    - Log-normal asset price distribution
    - Constant volatility and interest rate
    - No transaction costs or taxes
    - Continuous trading possible

Notes:
    N(x) is the Zelen & Severo approximation from
    options_analytics.core.distributions, so prices and Greeks carry an
    approximation error of order 1e-7 relative to closed-form references.

References:
    Black, F., & Scholes, M. (1973). The Pricing of Options and Corporate Liabilities.
    Journal of Political Economy, 81(3), 637-654.
"""

import math

from options_analytics.core.distributions import normal_cdf, normal_pdf
from options_analytics.utils.constants import DAYS_PER_YEAR, DEFAULT_INTEREST_RATE, PERCENT
from options_analytics.utils.errors import InvalidInputError
from options_analytics.utils.types import OPTION_TYPES, GreeksResult, OptionType


def _validate_inputs(S: float, K: float, t: float, r: float, sigma: float) -> None:
    """
    Validate option pricing inputs.

    Zero time or zero volatility would divide by zero in d1, so both are
    rejected here instead of letting an infinity or NaN through.

    Args:
        S: Underlying price
        K: Strike price
        t: Time to expiration (years)
        r: Risk-free rate
        sigma: Volatility (decimal)

    Raises:
        InvalidInputError: If any input is invalid
    """
    for name, value in (("S", S), ("K", K), ("t", t), ("r", r), ("sigma", sigma)):
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be finite, got {name}={value}")
    if S <= 0:
        raise InvalidInputError(f"Underlying price must be positive, got S={S}")
    if K <= 0:
        raise InvalidInputError(f"Strike price must be positive, got K={K}")
    if t <= 0:
        raise InvalidInputError(f"Time to expiration must be positive, got t={t}")
    if sigma <= 0:
        raise InvalidInputError(f"Volatility must be positive, got sigma={sigma}")


def _validate_type(option_type: str) -> None:
    if option_type not in OPTION_TYPES:
        raise InvalidInputError(f"option_type must be 'call' or 'put', got '{option_type}'")


def d1(S: float, K: float, t: float, r: float, sigma: float) -> float:
    """
    Calculate d1 parameter in Black-Scholes formula.

    Args:
        S: Current underlying price
        K: Strike price
        t: Time to expiration in years
        r: Risk-free interest rate (annualized, continuous)
        sigma: Volatility (annualized, decimal)

    Returns:
        The d1 parameter

    Formula:
        d1 = [ln(S/K) + (r + σ²/2)t] / (σ√t)
    """
    _validate_inputs(S, K, t, r, sigma)

    log_moneyness = math.log(S / K)
    drift = (r + 0.5 * sigma * sigma) * t
    diffusion = sigma * math.sqrt(t)

    return (log_moneyness + drift) / diffusion


def d2(S: float, K: float, t: float, r: float, sigma: float) -> float:
    """
    Calculate d2 parameter in Black-Scholes formula.

    Formula:
        d2 = d1 - σ√t

    Notes:
        For a call, N(d2) is the risk-neutral probability of exercise.
    """
    return d1(S, K, t, r, sigma) - sigma * math.sqrt(t)


def option_price(
    S: float, K: float, t: float, r: float, sigma: float, option_type: OptionType = "call"
) -> float:
    """
    Calculate European option price (call or put).

    Args:
        S, K, t, r, sigma: Standard Black-Scholes parameters
        option_type: "call" or "put"

    Returns:
        Option price

    Formulas:
        C = S·N(d1) - K·e^(-rt)·N(d2)
        P = K·e^(-rt)·N(-d2) - S·N(-d1)

    Raises:
        InvalidInputError: If option_type is not "call" or "put"

    Examples:
        >>> # ATM call with 1 year to expiry, 20% vol, 5% rate
        >>> abs(option_price(100, 100, 1.0, 0.05, 0.20) - 10.4506) < 0.01
        True
    """
    _validate_type(option_type)
    d1_value = d1(S, K, t, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(t)
    discount_strike = K * math.exp(-r * t)

    if option_type == "call":
        return S * normal_cdf(d1_value) - discount_strike * normal_cdf(d2_value)
    return discount_strike * normal_cdf(-d2_value) - S * normal_cdf(-d1_value)


# ===========================
# Greeks Calculations
# ===========================


def delta(
    S: float, K: float, t: float, r: float, sigma: float, option_type: OptionType = "call"
) -> float:
    """
    Calculate option delta (∂V/∂S).

    Formulas:
        Call delta: Δ_c = N(d1)
        Put delta:  Δ_p = N(d1) - 1

    Interpretation:
        Delta of 0.6 means: for $1 increase in the underlying, option
        price increases by ~$0.60.
    """
    _validate_type(option_type)
    cdf_d1 = normal_cdf(d1(S, K, t, r, sigma))
    return cdf_d1 if option_type == "call" else cdf_d1 - 1.0


def gamma(S: float, K: float, t: float, r: float, sigma: float) -> float:
    """
    Calculate option gamma (∂²V/∂S²), identical for calls and puts.

    Formula:
        Γ = φ(d1) / (S · σ · √t)
    """
    pdf_d1 = normal_pdf(d1(S, K, t, r, sigma))
    return pdf_d1 / (S * sigma * math.sqrt(t))


def theta(
    S: float, K: float, t: float, r: float, sigma: float, option_type: OptionType = "call"
) -> float:
    """
    Calculate option theta (∂V/∂t), reported per calendar day.

    Formulas (annualized, then divided by 365):
        Call: Θ_c = -S·φ(d1)·σ/(2√t) - r·K·e^(-rt)·N(d2)
        Put:  Θ_p = -S·φ(d1)·σ/(2√t) + r·K·e^(-rt)·N(-d2)

    Interpretation:
        Theta of -0.05 means the option loses $0.05 per calendar day,
        all else equal.
    """
    _validate_type(option_type)
    d1_value = d1(S, K, t, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(t)

    diffusion = -(S * normal_pdf(d1_value) * sigma) / (2.0 * math.sqrt(t))
    carry = r * K * math.exp(-r * t)

    if option_type == "call":
        theta_annual = diffusion - carry * normal_cdf(d2_value)
    else:
        theta_annual = diffusion + carry * normal_cdf(-d2_value)

    return theta_annual / DAYS_PER_YEAR


def vega(S: float, K: float, t: float, r: float, sigma: float) -> float:
    """
    Calculate option vega, per 1 point of volatility (e.g. 30% → 31%).

    Formula:
        ν = S · √t · φ(d1) / 100
    """
    pdf_d1 = normal_pdf(d1(S, K, t, r, sigma))
    return S * math.sqrt(t) * pdf_d1 / PERCENT


def rho(
    S: float, K: float, t: float, r: float, sigma: float, option_type: OptionType = "call"
) -> float:
    """
    Calculate option rho, per 1 point of interest rate (e.g. 5% → 6%).

    Formulas:
        Call rho: ρ_c = K·t·e^(-rt)·N(d2) / 100
        Put rho:  ρ_p = -K·t·e^(-rt)·N(-d2) / 100
    """
    _validate_type(option_type)
    d2_value = d2(S, K, t, r, sigma)
    discount_strike = K * t * math.exp(-r * t)

    if option_type == "call":
        return discount_strike * normal_cdf(d2_value) / PERCENT
    return -discount_strike * normal_cdf(-d2_value) / PERCENT


def price_and_greeks(
    option_type: OptionType,
    underlying_price: float,
    strike_price: float,
    volatility_pct: float,
    days_to_expiry: float,
    interest_rate: float = DEFAULT_INTEREST_RATE,
) -> GreeksResult:
    """
    Price one option contract and compute all of its Greeks.

    Args:
        option_type: "call" or "put"
        underlying_price: Current underlying price
        strike_price: Strike price
        volatility_pct: Implied volatility in percent (30 means 30%)
        days_to_expiry: Calendar days until expiration
        interest_rate: Risk-free rate (decimal), default 0.05

    Returns:
        GreeksResult with price, delta, gamma, theta, vega, rho

    Raises:
        InvalidInputError: For an unknown option type, non-positive prices,
            zero volatility or an expired option (days_to_expiry <= 0)

    Example:
        >>> g = price_and_greeks("call", 193.28, 190, 30, 30)
        >>> 0 < g.delta < 1 and g.theta < 0
        True
    """
    _validate_type(option_type)
    if days_to_expiry <= 0:
        raise InvalidInputError(
            f"Option is expired or expiring today (days_to_expiry={days_to_expiry}); "
            f"Greeks are undefined"
        )
    if volatility_pct <= 0:
        raise InvalidInputError(f"Volatility must be positive, got {volatility_pct}%")

    S = float(underlying_price)
    K = float(strike_price)
    t = days_to_expiry / DAYS_PER_YEAR
    r = float(interest_rate)
    sigma = volatility_pct / PERCENT

    _validate_inputs(S, K, t, r, sigma)

    d1_value = d1(S, K, t, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(t)
    sqrt_t = math.sqrt(t)
    pdf_d1 = normal_pdf(d1_value)
    discount_strike = K * math.exp(-r * t)

    if option_type == "call":
        price = S * normal_cdf(d1_value) - discount_strike * normal_cdf(d2_value)
        delta_value = normal_cdf(d1_value)
        theta_annual = -(S * pdf_d1 * sigma) / (2.0 * sqrt_t) - r * discount_strike * normal_cdf(d2_value)
        rho_value = discount_strike * t * normal_cdf(d2_value) / PERCENT
    else:
        price = discount_strike * normal_cdf(-d2_value) - S * normal_cdf(-d1_value)
        delta_value = normal_cdf(d1_value) - 1.0
        theta_annual = -(S * pdf_d1 * sigma) / (2.0 * sqrt_t) + r * discount_strike * normal_cdf(-d2_value)
        rho_value = -discount_strike * t * normal_cdf(-d2_value) / PERCENT

    return GreeksResult(
        price=price,
        delta=delta_value,
        gamma=pdf_d1 / (S * sigma * sqrt_t),
        theta=theta_annual / DAYS_PER_YEAR,
        vega=S * sqrt_t * pdf_d1 / PERCENT,
        rho=rho_value,
    )
