"""
Unit tests for single-condition evaluation.
"""

import pytest

from options_analytics.signals.conditions import (
    CONDITION_HANDLERS,
    Indicator,
    Operator,
    evaluate_condition,
    is_supported,
)
from options_analytics.utils.errors import UnrecognizedConditionError
from options_analytics.utils.types import (
    IndicatorCondition,
    PriceActionCondition,
    TechnicalSnapshot,
    condition_from_dict,
)


# ===========================
# Moving Averages
# ===========================


def test_sma_greater_compares_last_price():
    snapshot = TechnicalSnapshot(symbol="X", last_price=101.0)
    outcome = evaluate_condition(IndicatorCondition("SMA", ">", 100.0), snapshot)

    assert outcome.satisfied
    assert outcome.warning is None


def test_sma_less(aapl_snapshot):
    assert not evaluate_condition(IndicatorCondition("SMA", "<", 185.64), aapl_snapshot).satisfied
    assert evaluate_condition(IndicatorCondition("SMA", "<", 200), aapl_snapshot).satisfied


def test_ema_greater(aapl_snapshot):
    assert evaluate_condition(IndicatorCondition("EMA", ">", 190), aapl_snapshot).satisfied


def test_sma_crossover_against_other_period(aapl_snapshot):
    """SMA(50) above SMA(200)."""
    condition = IndicatorCondition(
        "SMA", "crossover", "SMA", parameters={"period": 50}, value_parameters={"period": 200}
    )
    assert evaluate_condition(condition, aapl_snapshot).satisfied


def test_sma_crossover_uses_default_periods(tsla_snapshot):
    # SMA(50)=244.80 > SMA(200)=238.15
    assert evaluate_condition(IndicatorCondition("SMA", "crossover", "SMA"), tsla_snapshot).satisfied


def test_ema_crossover_against_number(aapl_snapshot):
    condition = IndicatorCondition("EMA", "crossover", 195.0, parameters={"period": 12})
    assert not evaluate_condition(condition, aapl_snapshot).satisfied


def test_numeric_period_matches_string_key(aapl_snapshot):
    condition = IndicatorCondition(
        "SMA", "crossover", "SMA", parameters={"period": 20.0}, value_parameters={"period": "50"}
    )
    assert evaluate_condition(condition, aapl_snapshot).satisfied


# ===========================
# Oscillators
# ===========================


@pytest.mark.parametrize(
    "indicator,operator,value,expected",
    [
        ("RSI", "<", 70, True),
        ("RSI", ">", 70, False),
        ("MACD", ">", 0, True),
        ("ATR", "<", 5, True),
        ("ATR", ">", 5, False),
    ],
)
def test_oscillator_thresholds(aapl_snapshot, indicator, operator, value, expected):
    outcome = evaluate_condition(IndicatorCondition(indicator, operator, value), aapl_snapshot)
    assert outcome.satisfied is expected
    assert outcome.warning is None


def test_macd_line_parameter(aapl_snapshot):
    condition = IndicatorCondition("MACD", ">", 2.0, parameters={"line": "macd"})
    assert evaluate_condition(condition, aapl_snapshot).satisfied


# ===========================
# Bollinger Bands
# ===========================


@pytest.mark.parametrize(
    "operator,expected",
    [
        ("price_above_upper", False),
        ("price_below_lower", False),
        ("price_above_middle", True),
        ("price_below_middle", False),
    ],
)
def test_bollinger_bands(aapl_snapshot, operator, expected):
    outcome = evaluate_condition(IndicatorCondition("Bollinger Bands", operator), aapl_snapshot)
    assert outcome.satisfied is expected


def test_bollinger_reads_full_name_key():
    snapshot = TechnicalSnapshot(
        symbol="X", last_price=50.0, indicators={"Bollinger Bands": {"lower": 52.0}}
    )
    condition = IndicatorCondition("Bollinger Bands", "price_below_lower")
    assert evaluate_condition(condition, snapshot).satisfied


# ===========================
# Price Action
# ===========================


def test_price_action_flag(aapl_snapshot):
    assert evaluate_condition(PriceActionCondition("breakout"), aapl_snapshot).satisfied
    assert not evaluate_condition(PriceActionCondition("inside_bar"), aapl_snapshot).satisfied


def test_missing_price_action_flag_is_false_without_warning(aapl_snapshot):
    outcome = evaluate_condition(PriceActionCondition("double_bottom"), aapl_snapshot)
    assert not outcome.satisfied
    assert outcome.warning is None


# ===========================
# Fail-Closed Behaviour
# ===========================


@pytest.mark.parametrize(
    "indicator,operator",
    [
        ("RSI", "crossover"),
        ("SMA", "price_above_upper"),
        ("Stochastic", ">"),
        ("RSI", "between"),
    ],
)
def test_unsupported_pair_fails_closed(aapl_snapshot, caplog, indicator, operator):
    condition = IndicatorCondition(indicator, operator, 1)

    with caplog.at_level("WARNING"):
        outcome = evaluate_condition(condition, aapl_snapshot)

    assert not is_supported(condition)
    assert outcome.satisfied is False
    assert "Unsupported condition" in outcome.warning
    assert "Unsupported condition" in caplog.text


def test_unsupported_pair_is_deterministic(aapl_snapshot):
    condition = IndicatorCondition("ATR", "crossover", 1)
    outcomes = {evaluate_condition(condition, aapl_snapshot) for _ in range(20)}
    assert len(outcomes) == 1


def test_missing_indicator_data_fails_closed(tsla_snapshot):
    outcome = evaluate_condition(IndicatorCondition("ATR", ">", 0), tsla_snapshot)

    assert not outcome.satisfied
    assert "ATR(14)" in outcome.warning


def test_non_numeric_threshold_fails_closed(aapl_snapshot):
    outcome = evaluate_condition(IndicatorCondition("RSI", ">", "high"), aapl_snapshot)

    assert not outcome.satisfied
    assert "numeric value" in outcome.warning


def test_every_table_entry_is_supported():
    for indicator, operator in CONDITION_HANDLERS:
        assert is_supported(IndicatorCondition(indicator.value, operator.value, 0))


def test_enum_parse_unknown_names():
    assert Indicator.parse("Stochastic") is None
    assert Operator.parse(">=") is None
    assert Indicator.parse("Bollinger Bands") is Indicator.BOLLINGER


# ===========================
# Parsing
# ===========================


def test_condition_from_dict_camel_case():
    condition = condition_from_dict(
        {
            "type": "indicator",
            "indicator": "SMA",
            "operator": "crossover",
            "value": "SMA",
            "parameters": {"period": 50},
            "valueParameters": {"period": 200},
        }
    )
    assert isinstance(condition, IndicatorCondition)
    assert condition.value_parameters == {"period": 200}


def test_condition_from_dict_unknown_kind():
    with pytest.raises(UnrecognizedConditionError):
        condition_from_dict({"type": "fundamental", "metric": "pe"})
