"""
Entry/exit signal evaluation for one symbol or a universe of symbols.

Entry conditions are AND-ed (an empty list is satisfied), exit
conditions are OR-ed (an empty list is never satisfied). Exit takes
precedence: any exit condition makes the symbol a SELL.

Evaluation is pure and symbol-scoped, so batch scans fan out over a
thread pool with no shared state other than an optional ResultCache.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union

from options_analytics.core.cache import ResultCache, signal_key
from options_analytics.signals.conditions import evaluate_condition
from options_analytics.utils.collaborators import SnapshotProvider
from options_analytics.utils.constants import DEFAULT_MAX_WORKERS
from options_analytics.utils.types import RuleSet, Signal, SignalResult, TechnicalSnapshot

logger = logging.getLogger(__name__)


def classify(entry_signal: bool, exit_signal: bool) -> Signal:
    if exit_signal:
        return Signal.SELL
    if entry_signal:
        return Signal.BUY
    return Signal.HOLD


def evaluate_signals(rule_set: RuleSet, symbol: str, snapshot: TechnicalSnapshot) -> SignalResult:
    """
    Evaluate a rule set against one symbol's snapshot.

    Every condition is evaluated, even after the outcome is decided, so
    that all warnings are reported.

    Returns:
        SignalResult with entry/exit flags, BUY/SELL/HOLD classification
        and any warnings from unsupported conditions or missing data
    """
    entry_outcomes = [evaluate_condition(c, snapshot) for c in rule_set.entry_conditions]
    exit_outcomes = [evaluate_condition(c, snapshot) for c in rule_set.exit_conditions]

    entry_signal = all(outcome.satisfied for outcome in entry_outcomes)
    exit_signal = any(outcome.satisfied for outcome in exit_outcomes)
    warnings = tuple(
        outcome.warning for outcome in entry_outcomes + exit_outcomes if outcome.warning
    )

    return SignalResult(
        symbol=symbol,
        entry_signal=entry_signal,
        exit_signal=exit_signal,
        classification=classify(entry_signal, exit_signal),
        warnings=warnings,
    )


def _failed(symbol: str, reason: str) -> SignalResult:
    return SignalResult(
        symbol=symbol,
        entry_signal=False,
        exit_signal=False,
        classification=Signal.HOLD,
        warnings=(reason,),
    )


def _evaluate_cached(
    rule_set: RuleSet, symbol: str, snapshot: TechnicalSnapshot, cache: Optional[ResultCache]
) -> SignalResult:
    if cache is None:
        return evaluate_signals(rule_set, symbol, snapshot)
    return cache.get_or_compute(
        signal_key(rule_set, symbol, snapshot.version),
        lambda: evaluate_signals(rule_set, symbol, snapshot),
    )


def _evaluate_isolated(
    rule_set: RuleSet, symbol: str, snapshot: TechnicalSnapshot, cache: Optional[ResultCache]
) -> SignalResult:
    # One malformed snapshot must not abort the rest of the scan
    try:
        return _evaluate_cached(rule_set, symbol, snapshot, cache)
    except Exception as exc:
        logger.warning("Signal evaluation failed for %s: %s", symbol, exc, exc_info=True)
        return _failed(symbol, f"Evaluation failed: {exc}")


def _run(tasks: Sequence[Callable[[], SignalResult]], max_workers: int) -> list[SignalResult]:
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")
    if max_workers == 1 or len(tasks) <= 1:
        return [task() for task in tasks]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as executor:
        return list(executor.map(lambda task: task(), tasks))


def scan_signals(
    rule_set: RuleSet,
    snapshots: Union[Mapping[str, TechnicalSnapshot], Iterable[TechnicalSnapshot]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    cache: Optional[ResultCache] = None,
) -> list[SignalResult]:
    """
    Evaluate a rule set over many symbols in parallel.

    Args:
        rule_set: Entry/exit conditions
        snapshots: symbol -> snapshot mapping, or snapshots carrying their symbol
        max_workers: Upper bound on worker threads (1 runs inline)
        cache: Optional ResultCache keyed by (rule set, symbol, snapshot version)

    Returns:
        One SignalResult per symbol, in input order. A symbol whose
        evaluation fails is reported as HOLD with the error as a warning.
    """
    if isinstance(snapshots, Mapping):
        items = list(snapshots.items())
    else:
        items = [(snapshot.symbol, snapshot) for snapshot in snapshots]

    def task_for(symbol: str, snapshot: TechnicalSnapshot) -> Callable[[], SignalResult]:
        def task() -> SignalResult:
            return _evaluate_isolated(rule_set, symbol, snapshot, cache)

        return task

    return _run([task_for(symbol, snapshot) for symbol, snapshot in items], max_workers)


def scan_universe(
    provider: SnapshotProvider,
    rule_set: RuleSet,
    symbols: Iterable[str],
    max_workers: int = DEFAULT_MAX_WORKERS,
    cache: Optional[ResultCache] = None,
) -> list[SignalResult]:
    """
    Fetch each symbol's snapshot from the provider and evaluate the rule set.

    Provider failures (including a provider returning None) are isolated
    per symbol: the symbol is reported as HOLD with the failure as a
    warning and the rest of the scan continues.
    """

    def task_for(symbol: str) -> Callable[[], SignalResult]:
        def task() -> SignalResult:
            try:
                snapshot = provider.get_snapshot(symbol)
            except Exception as exc:  # provider is an external service
                logger.warning("Snapshot unavailable for %s: %s", symbol, exc, exc_info=True)
                return _failed(symbol, f"Snapshot unavailable: {exc}")
            if snapshot is None:
                logger.warning("Snapshot unavailable for %s: provider returned no data", symbol)
                return _failed(symbol, "Snapshot unavailable: provider returned no data")
            return _evaluate_isolated(rule_set, symbol, snapshot, cache)

        return task

    return _run([task_for(symbol) for symbol in symbols], max_workers)
