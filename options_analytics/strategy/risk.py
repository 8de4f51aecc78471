"""
Risk metrics and a heuristic outlook for option strategies.

risk_summary() reads max profit, max loss and risk/reward off a payoff
curve. outlook() labels a strategy from its aggregated Greeks with a
fixed decision list; the first matching rule wins.
"""

from typing import Optional, Union

from options_analytics.utils.constants import (
    OUTLOOK_DIRECTIONAL_DELTA,
    OUTLOOK_GAMMA,
    OUTLOOK_NEUTRAL_DELTA,
    OUTLOOK_VEGA,
    ROUNDING,
)
from options_analytics.utils.types import Outlook, PayoffCurve, RiskSummary, StrategyGreeks

NOT_AVAILABLE = "N/A"

GREEK_DESCRIPTIONS = {
    "delta": (
        "Delta measures the rate of change in an option's price relative to a $1 change "
        "in the underlying asset. A delta of 0.5 means the option price will change by "
        "approximately $0.50 for every $1 move in the underlying."
    ),
    "gamma": (
        "Gamma measures the rate of change in delta for a $1 change in the underlying. "
        "It shows how delta will change as the underlying price moves, indicating the "
        "stability of your delta exposure."
    ),
    "theta": (
        "Theta measures the rate of time decay in an option's value. A theta of -0.10 "
        "means the option will lose about $0.10 per day from time decay alone, assuming "
        "all other factors remain constant."
    ),
    "vega": (
        "Vega measures the sensitivity of an option's price to changes in implied "
        "volatility. A vega of 0.15 means the option price will change approximately "
        "$0.15 for each 1% change in implied volatility."
    ),
    "rho": (
        "Rho measures the sensitivity of an option's price to changes in interest rates. "
        "A rho of 0.05 means the option will gain approximately $0.05 for every 1% "
        "increase in interest rates."
    ),
}


def risk_summary(curve: PayoffCurve) -> RiskSummary:
    """
    Summarize the risk profile of a payoff curve.

    Returns:
        RiskSummary with:
            - max_profit: max(0, highest payoff)
            - max_loss: max(0, -lowest payoff), a positive magnitude
            - break_evens: the curve's break-even prices
            - risk_reward_ratio: max_loss / max_profit when both are
              positive, otherwise "N/A"

    Notes:
        Values are read off the sampled grid, so unbounded payoffs (a
        naked short call) report the loss at the edge of the grid.
    """
    payoffs = curve.payoffs
    if not payoffs:
        return RiskSummary(max_profit=0.0, max_loss=0.0, break_evens=(), risk_reward_ratio=NOT_AVAILABLE)

    max_profit = max(0.0, max(payoffs))
    max_loss = max(0.0, -min(payoffs))

    ratio: Union[float, str] = NOT_AVAILABLE
    if max_profit > 0 and max_loss > 0:
        ratio = round(max_loss / max_profit, ROUNDING["risk_reward"])

    return RiskSummary(
        max_profit=max_profit,
        max_loss=max_loss,
        break_evens=tuple(curve.break_evens),
        risk_reward_ratio=ratio,
    )


def outlook(greeks: Optional[StrategyGreeks]) -> Optional[Outlook]:
    """
    Classify a strategy's market outlook from its aggregated Greeks.

    Rules, evaluated in order:
        1. |delta| > 0.5                  -> Bullish / Bearish
        2. |delta| < 0.2 and gamma > 0.01 -> Neutral with Volatility Bias
        3. |delta| < 0.2 and theta > 0    -> Neutral with Time Decay Benefit
        4. vega > 0.5                     -> Long Volatility
        5. vega < -0.5                    -> Short Volatility
        6. otherwise                      -> Balanced

    Returns:
        Outlook, or None when no Greeks are available
    """
    if greeks is None:
        return None

    delta = greeks.delta
    abs_delta = abs(delta)

    if abs_delta > OUTLOOK_DIRECTIONAL_DELTA:
        if delta > 0:
            return Outlook(
                outlook="Bullish",
                description=(
                    "Strong directional bet on rising prices. Profit depends primarily "
                    "on upward price movement."
                ),
                risk="Price moving in the opposite direction",
            )
        return Outlook(
            outlook="Bearish",
            description=(
                "Strong directional bet on falling prices. Profit depends primarily "
                "on downward price movement."
            ),
            risk="Price moving in the opposite direction",
        )

    if abs_delta < OUTLOOK_NEUTRAL_DELTA and greeks.gamma > OUTLOOK_GAMMA:
        return Outlook(
            outlook="Neutral with Volatility Bias",
            description=(
                "Strategy benefits from significant price movement in either direction. "
                "Generally market-neutral but requires volatility for profitability."
            ),
            risk="Lack of movement in the underlying price",
        )

    if abs_delta < OUTLOOK_NEUTRAL_DELTA and greeks.theta > 0:
        return Outlook(
            outlook="Neutral with Time Decay Benefit",
            description=(
                "Strategy benefits from the passage of time. Profits from expiring option "
                "premium as long as the price stays within a certain range."
            ),
            risk="Significant price movement outside the expected range",
        )

    if greeks.vega > OUTLOOK_VEGA:
        return Outlook(
            outlook="Long Volatility",
            description=(
                "Strategy will benefit from increasing implied volatility, regardless of "
                "price direction."
            ),
            risk="Decreasing volatility and time decay",
        )

    if greeks.vega < -OUTLOOK_VEGA:
        return Outlook(
            outlook="Short Volatility",
            description="Strategy will benefit from decreasing implied volatility.",
            risk="Sudden increase in volatility or sharp price moves",
        )

    return Outlook(
        outlook="Balanced",
        description=(
            "Moderate exposure to multiple market factors, without an extreme position "
            "on price direction, volatility, or time."
        ),
        risk="Various factors depending on exact position structure",
    )


def interpret_greeks(greeks: StrategyGreeks) -> dict[str, str]:
    """Plain-English reading of the aggregated delta, gamma, theta and vega."""
    if greeks.delta > 0:
        delta_text = (
            f"Your strategy will gain approximately ${greeks.delta:.3f} "
            f"for each $1 increase in the underlying price."
        )
    else:
        delta_text = (
            f"Your strategy will gain approximately ${abs(greeks.delta):.3f} "
            f"for each $1 decrease in the underlying price."
        )

    gamma_text = (
        f"Your delta will change by approximately {greeks.gamma:.4f} "
        f"for each $1 move in the underlying."
    )

    if greeks.theta < 0:
        theta_text = (
            f"Your strategy will lose approximately ${abs(greeks.theta):.3f} per day from time decay."
        )
    else:
        theta_text = f"Your strategy will gain approximately ${greeks.theta:.3f} per day from time decay."

    if greeks.vega > 0:
        vega_text = (
            f"Your strategy will gain approximately ${greeks.vega:.3f} "
            f"for each 1% increase in implied volatility."
        )
    else:
        vega_text = (
            f"Your strategy will gain approximately ${abs(greeks.vega):.3f} "
            f"for each 1% decrease in implied volatility."
        )

    return {"delta": delta_text, "gamma": gamma_text, "theta": theta_text, "vega": vega_text}
