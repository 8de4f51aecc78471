"""
Evaluation of single rule conditions against a technical snapshot.

Indicator conditions are dispatched on the (Indicator, Operator) pair
through an explicit table. Pairs missing from the table, and conditions
whose data is absent from the snapshot, evaluate to False and carry a
warning for the caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from options_analytics.utils.constants import (
    DEFAULT_ATR_PERIOD,
    DEFAULT_EMA_CROSS_PERIOD,
    DEFAULT_EMA_PERIOD,
    DEFAULT_MACD_LINE,
    DEFAULT_RSI_PERIOD,
    DEFAULT_SMA_CROSS_PERIOD,
    DEFAULT_SMA_PERIOD,
)
from options_analytics.utils.errors import UnrecognizedConditionError
from options_analytics.utils.types import (
    Condition,
    IndicatorCondition,
    PriceActionCondition,
    TechnicalSnapshot,
)

logger = logging.getLogger(__name__)


class Indicator(str, Enum):
    SMA = "SMA"
    EMA = "EMA"
    RSI = "RSI"
    MACD = "MACD"
    BOLLINGER = "Bollinger Bands"
    ATR = "ATR"

    @classmethod
    def parse(cls, name: str) -> Optional["Indicator"]:
        try:
            return cls(name)
        except ValueError:
            return None


class Operator(str, Enum):
    GREATER = ">"
    LESS = "<"
    CROSSOVER = "crossover"
    PRICE_ABOVE_UPPER = "price_above_upper"
    PRICE_BELOW_LOWER = "price_below_lower"
    PRICE_ABOVE_MIDDLE = "price_above_middle"
    PRICE_BELOW_MIDDLE = "price_below_middle"

    @classmethod
    def parse(cls, name: str) -> Optional["Operator"]:
        try:
            return cls(name)
        except ValueError:
            return None


# Indicator -> key of its series in TechnicalSnapshot.indicators
SNAPSHOT_KEYS = {
    Indicator.SMA: "SMA",
    Indicator.EMA: "EMA",
    Indicator.RSI: "RSI",
    Indicator.MACD: "MACD",
    Indicator.BOLLINGER: "Bollinger",
    Indicator.ATR: "ATR",
}


@dataclass(frozen=True)
class ConditionOutcome:
    satisfied: bool
    warning: Optional[str] = None


class MissingIndicatorData(LookupError):
    pass


def _series_key(value: Any) -> str:
    # Periods arrive as 50, 50.0 or "50"; snapshots key them as "50"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _lookup(snapshot: TechnicalSnapshot, indicator: Indicator, key: Any) -> float:
    name = SNAPSHOT_KEYS[indicator]
    value = snapshot.indicator_value(name, _series_key(key))
    if value is None and indicator is Indicator.BOLLINGER:
        value = snapshot.indicator_value(indicator.value, _series_key(key))
    if value is None:
        raise MissingIndicatorData(f"No {name}({_series_key(key)}) data for {snapshot.symbol}")
    return value


def _threshold(condition: IndicatorCondition) -> float:
    try:
        return float(condition.value)
    except (TypeError, ValueError):
        raise UnrecognizedConditionError(
            f"{condition.indicator} {condition.operator} needs a numeric value, got {condition.value!r}"
        ) from None


def _compare(left: float, operator: Operator, right: float) -> bool:
    if operator is Operator.GREATER:
        return left > right
    return left < right


# ===========================
# Condition handlers
# ===========================


def _price_vs_value(condition: IndicatorCondition, snapshot: TechnicalSnapshot) -> bool:
    # Moving-average ">" / "<" compare the last price with the value
    operator = Operator(condition.operator)
    return _compare(snapshot.last_price, operator, _threshold(condition))


def _moving_average_crossover(default_period: str, default_cross_period: str) -> Callable:
    def handler(condition: IndicatorCondition, snapshot: TechnicalSnapshot) -> bool:
        indicator = Indicator(condition.indicator)
        period = condition.parameters.get("period", default_period)
        fast = _lookup(snapshot, indicator, period)

        if condition.value == indicator.value:
            other_period = condition.value_parameters.get("period", default_cross_period)
            return fast > _lookup(snapshot, indicator, other_period)
        return fast > _threshold(condition)

    return handler


def _oscillator(default_key: str, parameter: str = "period") -> Callable:
    def handler(condition: IndicatorCondition, snapshot: TechnicalSnapshot) -> bool:
        indicator = Indicator(condition.indicator)
        key = condition.parameters.get(parameter, default_key)
        value = _lookup(snapshot, indicator, key)
        return _compare(value, Operator(condition.operator), _threshold(condition))

    return handler


def _bollinger(band: str, above: bool) -> Callable:
    def handler(condition: IndicatorCondition, snapshot: TechnicalSnapshot) -> bool:
        level = _lookup(snapshot, Indicator.BOLLINGER, band)
        return snapshot.last_price > level if above else snapshot.last_price < level

    return handler


CONDITION_HANDLERS: dict[tuple[Indicator, Operator], Callable[[IndicatorCondition, TechnicalSnapshot], bool]] = {
    (Indicator.SMA, Operator.GREATER): _price_vs_value,
    (Indicator.SMA, Operator.LESS): _price_vs_value,
    (Indicator.SMA, Operator.CROSSOVER): _moving_average_crossover(DEFAULT_SMA_PERIOD, DEFAULT_SMA_CROSS_PERIOD),
    (Indicator.EMA, Operator.GREATER): _price_vs_value,
    (Indicator.EMA, Operator.LESS): _price_vs_value,
    (Indicator.EMA, Operator.CROSSOVER): _moving_average_crossover(DEFAULT_EMA_PERIOD, DEFAULT_EMA_CROSS_PERIOD),
    (Indicator.RSI, Operator.GREATER): _oscillator(DEFAULT_RSI_PERIOD),
    (Indicator.RSI, Operator.LESS): _oscillator(DEFAULT_RSI_PERIOD),
    (Indicator.MACD, Operator.GREATER): _oscillator(DEFAULT_MACD_LINE, parameter="line"),
    (Indicator.MACD, Operator.LESS): _oscillator(DEFAULT_MACD_LINE, parameter="line"),
    (Indicator.ATR, Operator.GREATER): _oscillator(DEFAULT_ATR_PERIOD),
    (Indicator.ATR, Operator.LESS): _oscillator(DEFAULT_ATR_PERIOD),
    (Indicator.BOLLINGER, Operator.PRICE_ABOVE_UPPER): _bollinger("upper", above=True),
    (Indicator.BOLLINGER, Operator.PRICE_BELOW_LOWER): _bollinger("lower", above=False),
    (Indicator.BOLLINGER, Operator.PRICE_ABOVE_MIDDLE): _bollinger("middle", above=True),
    (Indicator.BOLLINGER, Operator.PRICE_BELOW_MIDDLE): _bollinger("middle", above=False),
}


def is_supported(condition: Condition) -> bool:
    """Whether the evaluator implements this condition (price action is always supported)."""
    if isinstance(condition, PriceActionCondition):
        return True
    indicator = Indicator.parse(condition.indicator)
    operator = Operator.parse(condition.operator)
    return indicator is not None and operator is not None and (indicator, operator) in CONDITION_HANDLERS


def evaluate_condition(condition: Condition, snapshot: TechnicalSnapshot) -> ConditionOutcome:
    """
    Test one condition against a snapshot.

    Args:
        condition: IndicatorCondition or PriceActionCondition
        snapshot: Technical data for one symbol

    Returns:
        ConditionOutcome. Unsupported indicator/operator pairs, non-numeric
        thresholds and missing indicator data give satisfied=False with a
        warning message; absent price-action flags give satisfied=False
        without one.
    """
    if isinstance(condition, PriceActionCondition):
        return ConditionOutcome(satisfied=bool(snapshot.patterns.get(condition.action, False)))

    if not isinstance(condition, IndicatorCondition):
        warning = f"Unsupported condition type {type(condition).__name__}"
        logger.warning(warning)
        return ConditionOutcome(satisfied=False, warning=warning)

    indicator = Indicator.parse(condition.indicator)
    operator = Operator.parse(condition.operator)
    handler = CONDITION_HANDLERS.get((indicator, operator)) if indicator is not None and operator is not None else None

    if handler is None:
        warning = f"Unsupported condition: {condition.indicator} {condition.operator}"
        logger.warning("%s (treated as not met)", warning)
        return ConditionOutcome(satisfied=False, warning=warning)

    try:
        return ConditionOutcome(satisfied=bool(handler(condition, snapshot)))
    except UnrecognizedConditionError as exc:
        logger.warning("%s (treated as not met)", exc)
        return ConditionOutcome(satisfied=False, warning=str(exc))
    except MissingIndicatorData as exc:
        logger.debug("%s", exc)
        return ConditionOutcome(satisfied=False, warning=str(exc))
