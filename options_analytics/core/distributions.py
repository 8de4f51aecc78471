"""
Standard normal distribution approximations.

This module provides the standard normal cumulative distribution
function (CDF), via the Zelen & Severo rational approximation, and the
probability density function (PDF), with clamping for extreme values.
The CDF agrees with the exact error-function form to about 1e-7.
"""

import math

from options_analytics.utils.constants import (
    MAX_PDF_ARGUMENT,
    MAX_STANDARD_DEVIATIONS,
    ZS_B1,
    ZS_B2,
    ZS_B3,
    ZS_B4,
    ZS_B5,
    ZS_P,
)

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_pdf(x: float) -> float:
    """
    φ(x) = (1/√(2π)) · exp(-x²/2), returned as 0.0 for |x| > 10.

    Used both for gamma/vega/theta and inside the CDF's tail polynomial.

    >>> round(normal_pdf(0.0), 4)
    0.3989
    >>> normal_pdf(-12.0)
    0.0
    """
    if abs(x) > MAX_PDF_ARGUMENT:
        return 0.0

    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


def normal_cdf(x: float) -> float:
    """
    Standard normal cumulative distribution function.

    Uses the Zelen & Severo polynomial approximation (Abramowitz & Stegun
    26.2.17). For |x| > 8 the result is clamped to 0 or 1.

    Args:
        x: Value at which to evaluate the CDF

    Returns:
        Probability that a standard normal random variable is less than x

    Examples:
        >>> abs(normal_cdf(0.0) - 0.5) < 1e-7  # Median
        True
        >>> normal_cdf(10.0)  # Deep in tail
        1.0

    Notes:
        For x >= 0:
            t = 1 / (1 + p·x)
            N(x) ≈ 1 - φ(x)·(b1·t + b2·t² + b3·t³ + b4·t⁴ + b5·t⁵)
        and N(x) = 1 - N(-x) for x < 0. Absolute error is below 7.5e-8.
    """
    if x > MAX_STANDARD_DEVIATIONS:
        return 1.0
    if x < -MAX_STANDARD_DEVIATIONS:
        return 0.0

    t = 1.0 / (1.0 + ZS_P * abs(x))
    poly = t * (ZS_B1 + t * (ZS_B2 + t * (ZS_B3 + t * (ZS_B4 + t * ZS_B5))))
    tail = normal_pdf(x) * poly

    return 1.0 - tail if x > 0 else tail
