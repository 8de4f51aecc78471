"""
Predefined option strategy templates.

Each template lists its legs as strike offsets from the at-the-money
strike, which is the underlying price rounded to the strike step.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from options_analytics.core.black_scholes import price_and_greeks
from options_analytics.utils.constants import (
    CONTRACT_MULTIPLIER,
    DEFAULT_INTEREST_RATE,
    DEFAULT_STRIKE_STEP,
)
from options_analytics.utils.errors import InvalidInputError
from options_analytics.utils.types import Action, OptionLeg, OptionType, Strategy, validate_leg


@dataclass(frozen=True)
class TemplateLeg:
    option_type: OptionType
    action: Action
    strike_offset: float
    quantity: int = 1


@dataclass(frozen=True)
class StrategyTemplate:
    name: str
    description: str
    legs: tuple[TemplateLeg, ...]


STRATEGY_TEMPLATES: dict[str, StrategyTemplate] = {
    "long-call": StrategyTemplate(
        name="Long Call",
        description="Profit from an increase in the stock price with limited risk",
        legs=(TemplateLeg("call", "buy", 0),),
    ),
    "long-put": StrategyTemplate(
        name="Long Put",
        description="Profit from a decrease in the stock price with limited risk",
        legs=(TemplateLeg("put", "buy", 0),),
    ),
    "bull-call-spread": StrategyTemplate(
        name="Bull Call Spread",
        description="Buy a call at a lower strike and sell a call at a higher strike with the same expiration",
        legs=(TemplateLeg("call", "buy", 0), TemplateLeg("call", "sell", 10)),
    ),
    "bear-put-spread": StrategyTemplate(
        name="Bear Put Spread",
        description="Buy a put at a higher strike and sell a put at a lower strike with the same expiration",
        legs=(TemplateLeg("put", "buy", 0), TemplateLeg("put", "sell", -10)),
    ),
    "iron-condor": StrategyTemplate(
        name="Iron Condor",
        description="Sell an OTM put spread and an OTM call spread to profit from low volatility",
        legs=(
            TemplateLeg("put", "buy", -20),
            TemplateLeg("put", "sell", -10),
            TemplateLeg("call", "sell", 10),
            TemplateLeg("call", "buy", 20),
        ),
    ),
    "butterfly": StrategyTemplate(
        name="Butterfly Spread",
        description="Buy a call, sell two calls at a higher strike, and buy a call at an even higher strike",
        legs=(
            TemplateLeg("call", "buy", -10),
            TemplateLeg("call", "sell", 0, quantity=2),
            TemplateLeg("call", "buy", 10),
        ),
    ),
    "straddle": StrategyTemplate(
        name="Long Straddle",
        description="Buy a call and a put at the same strike price to profit from high volatility",
        legs=(TemplateLeg("call", "buy", 0), TemplateLeg("put", "buy", 0)),
    ),
    "strangle": StrategyTemplate(
        name="Long Strangle",
        description="Buy an OTM call and an OTM put to profit from high volatility at a lower cost than a straddle",
        legs=(TemplateLeg("call", "buy", 10), TemplateLeg("put", "buy", -10)),
    ),
}


def at_the_money_strike(underlying_price: float, strike_step: float = DEFAULT_STRIKE_STEP) -> float:
    if strike_step <= 0:
        raise InvalidInputError(f"Strike step must be positive, got {strike_step}")
    return round(underlying_price / strike_step) * strike_step


def build_strategy(
    template_key: str,
    underlying_price: float,
    strike_step: float = DEFAULT_STRIKE_STEP,
    premiums: Optional[Sequence[float]] = None,
    volatility_pct: Optional[float] = None,
    days_to_expiry: Optional[float] = None,
    interest_rate: float = DEFAULT_INTEREST_RATE,
) -> Strategy:
    """
    Instantiate a strategy template around the current underlying price.

    Args:
        template_key: Key in STRATEGY_TEMPLATES, e.g. "iron-condor"
        underlying_price: Current underlying price
        strike_step: Strike spacing used to find the at-the-money strike
        premiums: Per-leg premiums, in template leg order
        volatility_pct, days_to_expiry: When premiums are not given and
            both are, each leg is priced with Black-Scholes
        interest_rate: Risk-free rate used for theoretical premiums

    Returns:
        Strategy named after the template. Legs get a zero premium when
        neither premiums nor market parameters are supplied.

    Raises:
        InvalidInputError: Unknown template, wrong number of premiums, or a
            leg whose strike would not be positive
    """
    template = STRATEGY_TEMPLATES.get(template_key)
    if template is None:
        raise InvalidInputError(
            f"Unknown strategy template {template_key!r}; "
            f"choose from {', '.join(sorted(STRATEGY_TEMPLATES))}"
        )
    if premiums is not None and len(premiums) != len(template.legs):
        raise InvalidInputError(
            f"Template {template_key!r} has {len(template.legs)} legs, got {len(premiums)} premiums"
        )

    atm = at_the_money_strike(underlying_price, strike_step)
    priced = premiums is None and volatility_pct is not None and days_to_expiry is not None

    legs = []
    for index, template_leg in enumerate(template.legs):
        strike = atm + template_leg.strike_offset
        if strike <= 0:
            raise InvalidInputError(
                f"Template {template_key!r} puts leg {index} at a non-positive strike {strike}"
            )

        if premiums is not None:
            premium = float(premiums[index])
        elif priced:
            premium = price_and_greeks(
                template_leg.option_type, underlying_price, strike, volatility_pct, days_to_expiry, interest_rate
            ).price
        else:
            premium = 0.0

        legs.append(
            OptionLeg(
                option_type=template_leg.option_type,
                action=template_leg.action,
                strike=strike,
                premium=round(premium, 2),
                quantity=template_leg.quantity,
            )
        )

    return Strategy(legs=tuple(legs), underlying_price=underlying_price, name=template.name)


def contract_cost(strategy: Strategy, multiplier: int = CONTRACT_MULTIPLIER) -> float:
    """
    Cash outlay to open the strategy at its leg premiums.

    Positive is a net debit, negative a net credit; each contract covers
    `multiplier` shares. Legs that fail validation are left out.
    """
    total = 0.0
    for leg in strategy.legs:
        try:
            validate_leg(leg)
        except InvalidInputError:
            continue
        total += leg.direction * leg.quantity * leg.premium * multiplier
    return total
