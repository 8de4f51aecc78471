"""
Pytest configuration and shared fixtures.
"""

import pytest

from options_analytics.utils.types import (
    IndicatorCondition,
    MarketParameters,
    OptionLeg,
    PriceActionCondition,
    RuleSet,
    Strategy,
    TechnicalSnapshot,
)


@pytest.fixture
def standard_params():
    """At-the-money option: S=100, K=100, 365 days, 20% vol, 5% rate."""
    return {
        "underlying_price": 100.0,
        "strike_price": 100.0,
        "volatility_pct": 20.0,
        "days_to_expiry": 365,
        "interest_rate": 0.05,
    }


@pytest.fixture
def market():
    """30% vol, 30 days, 5% rate."""
    return MarketParameters(volatility_pct=30.0, days_to_expiry=30, interest_rate=0.05)


@pytest.fixture
def long_call():
    """Single long AAPL call, slightly in the money."""
    return Strategy(
        legs=(OptionLeg("call", "buy", 190.0, premium=5.0),),
        underlying_price=193.28,
        name="Long Call",
    )


@pytest.fixture
def bull_call_spread():
    """Buy 190 call for 5.00, sell 200 call for 2.00 (debit 3.00)."""
    return Strategy(
        legs=(
            OptionLeg("call", "buy", 190.0, premium=5.0),
            OptionLeg("call", "sell", 200.0, premium=2.0),
        ),
        underlying_price=193.28,
        name="Bull Call Spread",
    )


@pytest.fixture
def straddle():
    """Long 100 straddle: both legs at the same strike."""
    return Strategy(
        legs=(
            OptionLeg("call", "buy", 100.0, premium=4.0),
            OptionLeg("put", "buy", 100.0, premium=3.5),
        ),
        underlying_price=100.0,
        name="Long Straddle",
    )


@pytest.fixture
def aapl_snapshot():
    return TechnicalSnapshot(
        symbol="AAPL",
        last_price=193.28,
        indicators={
            "SMA": {"20": 190.12, "50": 185.64, "200": 176.40},
            "EMA": {"12": 191.90, "26": 189.35},
            "RSI": {"14": 62.5},
            "MACD": {"histogram": 0.84, "macd": 2.11, "signal": 1.27},
            "Bollinger": {"upper": 198.70, "middle": 190.12, "lower": 181.54},
            "ATR": {"14": 3.42},
        },
        patterns={"breakout": True, "inside_bar": False},
        version=1,
    )


@pytest.fixture
def tsla_snapshot():
    return TechnicalSnapshot(
        symbol="TSLA",
        last_price=231.10,
        indicators={
            "SMA": {"50": 244.80, "200": 238.15},
            "RSI": {"14": 74.2},
            "Bollinger": {"upper": 255.30, "middle": 241.00, "lower": 226.70},
        },
        patterns={"breakout": False},
        version=3,
    )


@pytest.fixture
def trend_rules():
    """Enter above the 50-day SMA with RSI under 70; exit on RSI over 70."""
    return RuleSet(
        entry_conditions=(
            IndicatorCondition("SMA", ">", 185.64, parameters={"period": 50}),
            IndicatorCondition("RSI", "<", 70, parameters={"period": 14}),
        ),
        exit_conditions=(IndicatorCondition("RSI", ">", 70, parameters={"period": 14}),),
    )


@pytest.fixture
def breakout_rules():
    return RuleSet(
        entry_conditions=(PriceActionCondition("breakout"),),
        exit_conditions=(),
    )
