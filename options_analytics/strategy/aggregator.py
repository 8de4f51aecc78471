"""
Aggregate Greeks and net cost across the legs of a strategy.

Each leg is priced on its own with price_and_greeks(); its Greeks are
scaled by direction × quantity (+1 buy, -1 sell) and summed. Rounding is
applied only to the final totals.
"""

import logging
from typing import Optional

from options_analytics.core.black_scholes import price_and_greeks
from options_analytics.utils.constants import DEFAULT_INTEREST_RATE, ROUNDING
from options_analytics.utils.errors import InvalidInputError
from options_analytics.utils.types import (
    GreeksResult,
    MarketParameters,
    OptionLeg,
    Strategy,
    StrategyGreeks,
    validate_leg,
)

logger = logging.getLogger(__name__)


def leg_greeks(leg: OptionLeg, underlying_price: float, market: MarketParameters) -> GreeksResult:
    """
    Signed, quantity-weighted Greeks of one leg.

    The price field of the result is the leg's signed cost contribution
    (price × quantity × direction).

    Raises:
        InvalidInputError: If the leg or the market parameters are invalid
    """
    validate_leg(leg)
    single = price_and_greeks(
        leg.option_type,
        underlying_price,
        leg.strike,
        market.volatility_pct,
        market.days_to_expiry,
        market.interest_rate,
    )
    return single.scaled(leg.direction * leg.quantity)


def aggregate(
    strategy: Strategy,
    volatility_pct: float,
    days_to_expiry: float,
    interest_rate: float = DEFAULT_INTEREST_RATE,
) -> Optional[StrategyGreeks]:
    """
    Sum signed Greeks and net premium across all legs.

    Args:
        strategy: Strategy to evaluate
        volatility_pct: Implied volatility in percent, applied to every leg
        days_to_expiry: Calendar days to expiry, applied to every leg
        interest_rate: Risk-free rate (decimal)

    Returns:
        StrategyGreeks rounded for display, or None if the strategy has no legs.
        Legs that cannot be priced are left out of the totals and listed in
        StrategyGreeks.errors; if no leg can be priced every total is 0.0.

    Example:
        >>> from options_analytics.utils.types import OptionLeg, Strategy
        >>> s = Strategy(legs=(OptionLeg("call", "buy", 190, 5.0),), underlying_price=193.28)
        >>> aggregate(s, 30, 30).delta > 0
        True
    """
    if not strategy.legs:
        return None

    market = MarketParameters(volatility_pct, days_to_expiry, interest_rate)
    totals = {"delta": 0.0, "gamma": 0.0, "theta": 0.0, "vega": 0.0, "rho": 0.0, "cost": 0.0}
    per_leg: dict[int, GreeksResult] = {}
    errors: dict[int, str] = {}

    for index, leg in enumerate(strategy.legs):
        try:
            contribution = leg_greeks(leg, strategy.underlying_price, market)
        except InvalidInputError as exc:
            logger.warning("Skipping leg %d (%s): %s", index, leg.label, exc)
            errors[index] = str(exc)
            continue

        per_leg[index] = contribution
        totals["delta"] += contribution.delta
        totals["gamma"] += contribution.gamma
        totals["theta"] += contribution.theta
        totals["vega"] += contribution.vega
        totals["rho"] += contribution.rho
        totals["cost"] += contribution.price

    return StrategyGreeks(
        **{name: round(value, ROUNDING[name]) for name, value in totals.items()},
        legs=per_leg,
        errors=errors,
    )
