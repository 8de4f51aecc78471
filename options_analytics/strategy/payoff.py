"""
Expiration payoff curves and break-even detection.

The curve is sampled on a fixed grid of 41 prices spanning the strikes
with half the strike span of padding on each side. Break-evens are found
by scanning adjacent grid points for a sign change and interpolating
linearly, so their precision is bounded by the grid step; refine=True
polishes each crossing with Brent's method on the exact payoff.
"""

import logging
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from options_analytics.utils.constants import (
    BREAK_EVEN_DEDUP_TOLERANCE,
    BREAK_EVEN_XTOL,
    DEGENERATE_SPAN_FALLBACK,
    DEGENERATE_SPAN_FRACTION,
    PAYOFF_GRID_STEPS,
    PAYOFF_PADDING_FRACTION,
)
from options_analytics.utils.errors import InvalidInputError
from options_analytics.utils.types import (
    Action,
    OptionLeg,
    OptionType,
    PayoffCurve,
    PayoffPoint,
    Strategy,
    validate_leg,
)

logger = logging.getLogger(__name__)


def option_payoff(
    option_type: OptionType, action: Action, strike: float, premium: float, price: float
) -> float:
    """
    Profit/loss of one contract at expiration.

    Formulas:
        Long call:  max(0, S - K) - premium
        Short call: premium - max(0, S - K)
        Long put:   max(0, K - S) - premium
        Short put:  premium - max(0, K - S)
    """
    if option_type == "call":
        intrinsic = max(0.0, price - strike)
    else:
        intrinsic = max(0.0, strike - price)

    if action == "buy":
        return intrinsic - premium
    return premium - intrinsic


def leg_payoff(leg: OptionLeg, price: float) -> float:
    return option_payoff(leg.option_type, leg.action, leg.strike, leg.premium, price) * leg.quantity


def payoff_at(strategy: Strategy, price: float) -> float:
    """Exact total payoff of the strategy at one underlying price."""
    return sum(leg_payoff(leg, price) for leg in strategy.legs)


def price_grid(strikes: Sequence[float], steps: int = PAYOFF_GRID_STEPS) -> list[float]:
    """
    Build the price grid for a payoff curve.

    Args:
        strikes: Strikes of the legs being plotted (at least one)
        steps: Number of intervals; the grid has steps + 1 points

    Returns:
        Evenly spaced prices from max(min_strike - pad, 0) to max_strike + pad,
        where pad is PAYOFF_PADDING_FRACTION of the strike span

    Notes:
        When every strike is the same the span is zero. A span of
        DEGENERATE_SPAN_FRACTION × strike is used instead so the curve
        still shows the kink.
    """
    if not strikes:
        raise InvalidInputError("Cannot build a price grid without strikes")
    if steps < 1:
        raise InvalidInputError(f"steps must be at least 1, got {steps}")

    low = min(strikes)
    high = max(strikes)
    span = high - low

    if span <= 0:
        span = DEGENERATE_SPAN_FRACTION * high or DEGENERATE_SPAN_FALLBACK
        logger.debug("All legs share strike %s; using fallback span %s", high, span)

    lower = max(low - PAYOFF_PADDING_FRACTION * span, 0.0)
    upper = high + PAYOFF_PADDING_FRACTION * span

    return [float(price) for price in np.linspace(lower, upper, steps + 1)]


def find_break_evens(prices: Sequence[float], payoffs: Sequence[float]) -> list[float]:
    """
    Locate zero crossings of a sampled payoff curve.

    For each adjacent pair where the payoff changes sign or touches zero,
    the crossing is linearly interpolated:
        x = x1 + (0 - y1)·(x2 - x1)/(y2 - y1)

    A run of points lying exactly on zero contributes only its end points.
    Crossings closer than BREAK_EVEN_DEDUP_TOLERANCE are merged.
    """
    if len(prices) != len(payoffs):
        raise ValueError(
            f"prices ({len(prices)}) and payoffs ({len(payoffs)}) must have same length"
        )

    points: list[float] = []
    for i in range(1, len(prices)):
        x1, y1 = prices[i - 1], payoffs[i - 1]
        x2, y2 = prices[i], payoffs[i]

        if not ((y1 <= 0 <= y2) or (y1 >= 0 >= y2)):
            continue
        if y1 == y2:
            # Flat segment on the axis
            continue

        crossing = x1 + (0.0 - y1) * (x2 - x1) / (y2 - y1)
        if not points or abs(points[-1] - crossing) > BREAK_EVEN_DEDUP_TOLERANCE:
            points.append(float(crossing))

    return points


def _refine(strategy: Strategy, crossing: float, prices: Sequence[float]) -> float:
    """Polish a linearly interpolated break-even with Brent's method on the exact payoff."""
    index = int(np.searchsorted(prices, crossing))
    lo = prices[max(index - 1, 0)]
    hi = prices[min(index, len(prices) - 1)]
    f_lo = payoff_at(strategy, lo)
    f_hi = payoff_at(strategy, hi)

    if f_lo == 0.0:
        return float(lo)
    if f_hi == 0.0:
        return float(hi)
    if f_lo * f_hi > 0:
        # The interpolated point sits on a grid node shared by two cells
        return crossing

    return float(brentq(lambda price: payoff_at(strategy, price), lo, hi, xtol=BREAK_EVEN_XTOL))


def payoff_curve(
    strategy: Strategy, steps: int = PAYOFF_GRID_STEPS, refine: bool = False
) -> PayoffCurve:
    """
    Compute per-leg and total payoff across the price grid, plus break-evens.

    Args:
        strategy: Strategy to evaluate; premiums are taken from the legs
        steps: Number of grid intervals (41 points by default)
        refine: Polish break-evens with scipy's brentq on the exact payoff

    Returns:
        PayoffCurve. Legs that fail validation are left out and reported in
        PayoffCurve.errors; a strategy with no usable legs gives an empty curve.

    Example:
        >>> from options_analytics.utils.types import OptionLeg, Strategy
        >>> legs = (OptionLeg("call", "buy", 190, 5.0), OptionLeg("call", "sell", 200, 2.0))
        >>> curve = payoff_curve(Strategy(legs=legs, underlying_price=193.28))
        >>> len(curve), [round(b, 2) for b in curve.break_evens]
        (41, [193.0])
    """
    valid: list[tuple[int, OptionLeg]] = []
    errors: dict[int, str] = {}

    for index, leg in enumerate(strategy.legs):
        try:
            validate_leg(leg)
        except InvalidInputError as exc:
            logger.warning("Leaving leg %d (%s) out of payoff curve: %s", index, leg.label, exc)
            errors[index] = str(exc)
            continue
        valid.append((index, leg))

    if not valid:
        return PayoffCurve(points=(), break_evens=(), errors=errors)

    prices = price_grid([leg.strike for _, leg in valid], steps)
    points = []
    for price in prices:
        per_leg = {index: leg_payoff(leg, price) for index, leg in valid}
        points.append(
            PayoffPoint(underlying_price=price, total_payoff=sum(per_leg.values()), payoff_per_leg=per_leg)
        )

    break_evens = find_break_evens(prices, [point.total_payoff for point in points])

    if refine and break_evens:
        usable = Strategy(legs=tuple(leg for _, leg in valid), underlying_price=strategy.underlying_price)
        break_evens = [_refine(usable, crossing, prices) for crossing in break_evens]

    return PayoffCurve(points=tuple(points), break_evens=tuple(break_evens), errors=errors)


def to_frame(curve: PayoffCurve) -> pd.DataFrame:
    """Tabulate a payoff curve with columns "price", "payoff", "leg0", "leg1", ..."""
    rows = []
    for point in curve:
        row = {"price": point.underlying_price, "payoff": point.total_payoff}
        for index, value in point.payoff_per_leg.items():
            row[f"leg{index}"] = value
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=["price", "payoff"])
    return pd.DataFrame(rows)
