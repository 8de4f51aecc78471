"""
Interfaces of the services the analytics core talks to.

The core ships no implementations; callers pass in objects that satisfy
these protocols (an HTTP client, a database repository, a test double).
"""

from typing import Any, Mapping, Optional, Protocol, Sequence

from options_analytics.utils.types import Strategy, TechnicalSnapshot


class SnapshotProvider(Protocol):
    """Quote / technical-data source."""

    def get_snapshot(self, symbol: str) -> TechnicalSnapshot:
        ...


class StrategyRepository(Protocol):
    """Strategy persistence."""

    def get(self, strategy_id: str) -> Optional[Strategy]:
        ...

    def list(self) -> Sequence[Strategy]:
        ...

    def create(self, strategy: Strategy) -> str:
        ...


class BacktestRunner(Protocol):
    """Backtest / optimization service; its result is opaque to the core."""

    def run(self, strategy: Strategy, params: Mapping[str, Any]) -> Mapping[str, Any]:
        ...
