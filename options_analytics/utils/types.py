"""
Data types and structures for strategy analytics.

This module defines the dataclasses used throughout the engine for
representing option legs, strategies, market parameters, Greeks,
payoff curves, rule conditions and signal results. Input types are
immutable; every computation returns new values.
"""

import hashlib
import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator, Literal, Mapping, Optional, Union

from options_analytics.utils.constants import DEFAULT_INTEREST_RATE
from options_analytics.utils.errors import InvalidInputError, UnrecognizedConditionError

OptionType = Literal["call", "put"]
Action = Literal["buy", "sell"]

OPTION_TYPES = ("call", "put")
ACTIONS = ("buy", "sell")


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (dashboard payloads use camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _coerce_quantity(value: Any) -> Any:
    # JSON numbers such as 2.0 become 2; anything else is left for validate_leg()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


# ===========================
# Strategy definition
# ===========================


@dataclass(frozen=True)
class OptionLeg:
    """
    One option position within a strategy.

    Attributes:
        option_type: Either "call" or "put"
        action: Either "buy" or "sell"
        strike: Strike price
        premium: Per-contract price paid (buy) or received (sell)
        quantity: Number of contracts

    Notes:
        Nothing is checked on construction. validate_leg() checks the leg
        when it is used, so a strategy holding one bad leg can still be
        analyzed leg by leg.
    """
    option_type: OptionType
    action: Action
    strike: float
    premium: float = 0.0
    quantity: int = 1

    @property
    def direction(self) -> int:
        """+1 for long legs, -1 for short legs."""
        return 1 if self.action == "buy" else -1

    @property
    def label(self) -> str:
        return f"{self.action} {self.quantity} {str(self.option_type).upper()} {self.strike:g}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "option_type": self.option_type,
            "action": self.action,
            "strike": self.strike,
            "premium": self.premium,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptionLeg":
        """Build a leg from snake_case or dashboard camelCase keys."""
        strike = _first(data, "strike", "strikePrice", "strike_price")
        if strike is None:
            raise InvalidInputError(f"Leg is missing a strike price: {dict(data)}")
        return cls(
            option_type=str(_first(data, "option_type", "type", default="")).lower(),
            action=str(_first(data, "action", default="")).lower(),
            strike=float(strike),
            premium=float(_first(data, "premium", "price", default=0.0)),
            quantity=_coerce_quantity(_first(data, "quantity", default=1)),
        )


def validate_leg(leg: OptionLeg) -> None:
    """
    Validate an option leg before it is priced or plotted.

    Raises:
        InvalidInputError: For an unknown option type or action, a strike
            that is not positive, a quantity that is not a positive
            integer, or a premium that is negative or not finite
    """
    if leg.option_type not in OPTION_TYPES:
        raise InvalidInputError(f"Option type must be 'call' or 'put', got {leg.option_type!r}")
    if leg.action not in ACTIONS:
        raise InvalidInputError(f"Action must be 'buy' or 'sell', got {leg.action!r}")
    if not math.isfinite(leg.strike) or leg.strike <= 0:
        raise InvalidInputError(f"Strike price must be positive, got K={leg.strike}")
    quantity = leg.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidInputError(f"Quantity must be a positive integer, got {quantity!r}")
    if quantity <= 0 or not float(quantity).is_integer():
        raise InvalidInputError(f"Quantity must be a positive integer, got {quantity!r}")
    if not math.isfinite(leg.premium) or leg.premium < 0:
        raise InvalidInputError(f"Premium cannot be negative, got {leg.premium}")


@dataclass(frozen=True)
class Strategy:
    """
    A multi-leg option strategy on one underlying.

    Attributes:
        legs: Ordered legs (order matters for display only)
        underlying_price: Current price of the underlying
        name: Display name
    """
    legs: tuple[OptionLeg, ...]
    underlying_price: float
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "legs", tuple(self.legs))

    @property
    def strikes(self) -> list[float]:
        return [leg.strike for leg in self.legs]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "underlying_price": self.underlying_price,
            "legs": [leg.to_dict() for leg in self.legs],
        }

    def fingerprint(self) -> str:
        """Stable value hash of the legs and underlying price (name excluded)."""
        return _digest(
            {
                "underlying_price": float(self.underlying_price),
                "legs": [leg.to_dict() for leg in self.legs],
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Strategy":
        underlying = _first(data, "underlying_price", "underlyingPrice")
        if underlying is None:
            raise InvalidInputError("Strategy is missing an underlying price")
        return cls(
            legs=tuple(OptionLeg.from_dict(leg) for leg in data.get("legs", [])),
            underlying_price=float(underlying),
            name=str(data.get("name", "")),
        )


@dataclass(frozen=True)
class MarketParameters:
    """
    Market inputs shared by every leg of a strategy.

    Attributes:
        volatility_pct: Implied volatility in percent (30 means 30%)
        days_to_expiry: Calendar days until expiration
        interest_rate: Risk-free rate (annualized, continuous)
    """
    volatility_pct: float
    days_to_expiry: int
    interest_rate: float = DEFAULT_INTEREST_RATE


# ===========================
# Pricing results
# ===========================


@dataclass(frozen=True)
class GreeksResult:
    """
    Price and Greeks of one option position.

    Attributes:
        price: Theoretical option price
        delta: ∂V/∂S
        gamma: ∂²V/∂S²
        theta: ∂V/∂t, per calendar day
        vega: ∂V/∂σ, per 1 point of volatility
        rho: ∂V/∂r, per 1 point of interest rate
    """
    price: float
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    def scaled(self, factor: float) -> "GreeksResult":
        return GreeksResult(
            price=self.price * factor,
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            theta=self.theta * factor,
            vega=self.vega * factor,
            rho=self.rho * factor,
        )


@dataclass(frozen=True)
class StrategyGreeks:
    """
    Aggregated Greeks of a strategy.

    Attributes:
        delta, gamma, theta, vega, rho: Signed, quantity-weighted sums
        cost: Net premium (positive = debit paid, negative = credit received)
        legs: Leg index -> signed contribution of that leg
        errors: Leg index -> reason the leg was left out
    """
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float
    cost: float
    legs: dict[int, GreeksResult] = field(default_factory=dict)
    errors: dict[int, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


# ===========================
# Payoff and risk
# ===========================


@dataclass(frozen=True)
class PayoffPoint:
    """Profit/loss of a strategy at one underlying price at expiration."""
    underlying_price: float
    total_payoff: float
    payoff_per_leg: dict[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PayoffCurve:
    """
    Payoff curve over a price grid with its break-even points.

    Iterating yields the PayoffPoint sequence; the curve can be iterated
    any number of times.
    """
    points: tuple[PayoffPoint, ...]
    break_evens: tuple[float, ...]
    errors: dict[int, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[PayoffPoint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def prices(self) -> list[float]:
        return [point.underlying_price for point in self.points]

    @property
    def payoffs(self) -> list[float]:
        return [point.total_payoff for point in self.points]


@dataclass(frozen=True)
class RiskSummary:
    """
    Attributes:
        max_profit: Largest payoff on the grid (0 if never positive)
        max_loss: Largest loss as a positive magnitude (0 if never negative)
        break_evens: Prices where the payoff crosses zero
        risk_reward_ratio: max_loss / max_profit, or "N/A"
    """
    max_profit: float
    max_loss: float
    break_evens: tuple[float, ...]
    risk_reward_ratio: Union[float, str]


@dataclass(frozen=True)
class Outlook:
    outlook: str
    description: str
    risk: str


# ===========================
# Signal rules
# ===========================


@dataclass(frozen=True)
class IndicatorCondition:
    """
    Comparison of an indicator (or the last price) against a value.

    Attributes:
        indicator: Indicator name, e.g. "SMA", "RSI", "Bollinger Bands"
        operator: ">", "<", "crossover", "price_above_upper", ...
        value: Threshold, or the name of another indicator for crossovers
        parameters: Indicator parameters, e.g. {"period": 50}
        value_parameters: Parameters of the compared indicator
    """
    kind: ClassVar[str] = "indicator"

    indicator: str
    operator: str
    value: Union[float, str, None] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    value_parameters: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "indicator": self.indicator,
            "operator": self.operator,
            "value": self.value,
            "parameters": dict(self.parameters),
            "valueParameters": dict(self.value_parameters),
        }


@dataclass(frozen=True)
class PriceActionCondition:
    """Boolean price-action pattern flag, e.g. "breakout" or "inside_bar"."""
    kind: ClassVar[str] = "priceAction"

    action: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "action": self.action}


Condition = Union[IndicatorCondition, PriceActionCondition]


def condition_from_dict(data: Mapping[str, Any]) -> Condition:
    """
    Parse a rule condition.

    Raises:
        UnrecognizedConditionError: If the condition kind is missing or unknown
    """
    kind = _first(data, "kind", "type", default="")
    if kind == "indicator":
        return IndicatorCondition(
            indicator=str(data.get("indicator", "")),
            operator=str(data.get("operator", "")),
            value=data.get("value"),
            parameters=dict(data.get("parameters") or {}),
            value_parameters=dict(_first(data, "value_parameters", "valueParameters", default={})),
        )
    if kind in ("priceAction", "price_action"):
        return PriceActionCondition(action=str(data.get("action", "")))
    raise UnrecognizedConditionError(f"Unknown condition kind {kind!r}")


@dataclass(frozen=True)
class RuleSet:
    """Entry conditions are AND-ed, exit conditions are OR-ed."""
    entry_conditions: tuple[Condition, ...] = ()
    exit_conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_conditions", tuple(self.entry_conditions))
        object.__setattr__(self, "exit_conditions", tuple(self.exit_conditions))

    def fingerprint(self) -> str:
        return _digest(
            {
                "entry": [c.to_dict() for c in self.entry_conditions],
                "exit": [c.to_dict() for c in self.exit_conditions],
            }
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RuleSet":
        entry = _first(data, "entry_conditions", "entryConditions", default=[])
        exit_ = _first(data, "exit_conditions", "exitConditions", default=[])
        return cls(
            entry_conditions=tuple(condition_from_dict(c) for c in entry),
            exit_conditions=tuple(condition_from_dict(c) for c in exit_),
        )


@dataclass(frozen=True)
class TechnicalSnapshot:
    """
    Technical data for one symbol at one point in time.

    Attributes:
        symbol: Ticker
        last_price: Last traded price
        indicators: Indicator name -> {period or band -> value},
            e.g. {"SMA": {"50": 185.64}, "Bollinger": {"upper": 202.3}}
        patterns: Price-action flag -> bool
        version: Monotonic snapshot version, used as the cache key
    """
    symbol: str
    last_price: float
    indicators: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    patterns: Mapping[str, bool] = field(default_factory=dict)
    version: int = 0

    def indicator_value(self, name: str, key: Any) -> Optional[float]:
        series = self.indicators.get(name)
        if series is None:
            return None
        value = series.get(str(key))
        return None if value is None else float(value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], symbol: Optional[str] = None) -> "TechnicalSnapshot":
        indicators = {
            str(name): {str(key): float(value) for key, value in series.items()}
            for name, series in (data.get("indicators") or {}).items()
        }
        patterns = {str(k): bool(v) for k, v in (data.get("patterns") or {}).items()}
        return cls(
            symbol=str(_first(data, "symbol", default=symbol or "")),
            last_price=float(_first(data, "last_price", "lastPrice", "price", default=0.0)),
            indicators=indicators,
            patterns=patterns,
            version=int(data.get("version", 0)),
        )


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class SignalResult:
    """
    Attributes:
        symbol: Ticker
        entry_signal: All entry conditions held
        exit_signal: Any exit condition held
        classification: BUY, SELL or HOLD
        warnings: Diagnostics for conditions that could not be evaluated
    """
    symbol: str
    entry_signal: bool
    exit_signal: bool
    classification: Signal
    warnings: tuple[str, ...] = ()
