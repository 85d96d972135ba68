"""Protocol interfaces for the poll loop's collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from decimal import Decimal

    from updown.engine.window import WindowId
    from updown.models.market import MarketSnapshot
    from updown.models.order import Fill, OrderIntent


@runtime_checkable
class SnapshotFeed(Protocol):
    """Protocol for the market-data collaborator."""

    async def fetch_snapshot(self, window_id: WindowId) -> MarketSnapshot: ...

    async def close(self) -> None: ...


@runtime_checkable
class OrderRouter(Protocol):
    """Protocol for the live-order collaborator."""

    def submit(self, intent: OrderIntent, snapshot: MarketSnapshot) -> Fill: ...


@runtime_checkable
class PollAudit(Protocol):
    """Protocol for the per-poll audit trail."""

    def record_poll(self, snapshot: MarketSnapshot, resolved_target: Decimal | None) -> None: ...
