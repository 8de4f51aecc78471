"""
One-call analysis of a strategy: Greeks, payoff curve, risk and outlook.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from options_analytics.core.cache import ResultCache, greeks_key, payoff_key
from options_analytics.strategy.aggregator import aggregate
from options_analytics.strategy.payoff import payoff_curve
from options_analytics.strategy.risk import outlook, risk_summary
from options_analytics.utils.collaborators import BacktestRunner, StrategyRepository
from options_analytics.utils.constants import PAYOFF_GRID_STEPS
from options_analytics.utils.errors import InvalidInputError
from options_analytics.utils.types import (
    MarketParameters,
    Outlook,
    PayoffCurve,
    RiskSummary,
    Strategy,
    StrategyGreeks,
    validate_leg,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyAnalysis:
    strategy: Strategy
    market: MarketParameters
    greeks: Optional[StrategyGreeks]
    curve: PayoffCurve
    risk: RiskSummary
    outlook: Optional[Outlook]

    @property
    def errors(self) -> dict[int, str]:
        """Leg index -> message, merged from the Greeks and payoff passes."""
        merged = dict(self.curve.errors)
        if self.greeks is not None:
            merged.update(self.greeks.errors)
        return merged


def analyze_strategy(
    strategy: Strategy,
    market: MarketParameters,
    cache: Optional[ResultCache] = None,
    steps: int = PAYOFF_GRID_STEPS,
    refine: bool = False,
) -> StrategyAnalysis:
    """
    Run the aggregator, payoff generator and risk classifier on one strategy.

    Args:
        strategy: Strategy to analyze
        market: Volatility, days to expiry and interest rate
        cache: Optional ResultCache; Greeks are keyed by (strategy, market)
            and payoff curves by strategy alone
        steps: Payoff grid intervals
        refine: Polish break-evens on the exact payoff

    Returns:
        StrategyAnalysis. A strategy with no legs yields greeks=None,
        an empty curve, zero risk and outlook=None.
    """
    def compute_greeks() -> Optional[StrategyGreeks]:
        return aggregate(strategy, market.volatility_pct, market.days_to_expiry, market.interest_rate)

    def compute_curve() -> PayoffCurve:
        return payoff_curve(strategy, steps=steps, refine=refine)

    if cache is not None:
        greeks = cache.get_or_compute(greeks_key(strategy, market), compute_greeks)
        curve = cache.get_or_compute(payoff_key(strategy, steps, refine), compute_curve)
    else:
        greeks = compute_greeks()
        curve = compute_curve()

    if greeks is not None and not greeks.success:
        logger.warning(
            "Strategy %r analyzed with %d of %d legs failing",
            strategy.name,
            len(greeks.errors),
            len(strategy.legs),
        )

    return StrategyAnalysis(
        strategy=strategy,
        market=market,
        greeks=greeks,
        curve=curve,
        risk=risk_summary(curve),
        outlook=outlook(greeks),
    )


def analyze_saved_strategy(
    repository: StrategyRepository,
    strategy_id: str,
    market: MarketParameters,
    cache: Optional[ResultCache] = None,
) -> Optional[StrategyAnalysis]:
    """Load a strategy through the repository and analyze it; None if it does not exist."""
    strategy = repository.get(strategy_id)
    if strategy is None:
        logger.info("Strategy %s not found", strategy_id)
        return None
    return analyze_strategy(strategy, market, cache=cache)


def backtest_strategy(
    runner: BacktestRunner, strategy: Strategy, params: Optional[Mapping[str, Any]] = None
) -> Mapping[str, Any]:
    """
    Hand a strategy to the backtest service.

    Raises:
        InvalidInputError: If the strategy has no legs or a leg is invalid
    """
    if not strategy.legs:
        raise InvalidInputError("Cannot backtest a strategy with no legs")
    for leg in strategy.legs:
        validate_leg(leg)
    return runner.run(strategy, dict(params or {}))
