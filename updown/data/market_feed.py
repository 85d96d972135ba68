"""Market feed: assembles one consistent snapshot per poll."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from updown.core.errors import FetchFailure, MalformedSnapshot
from updown.core.logging import get_logger
from updown.data.binance_ticker import BinanceTicker
from updown.data.polymarket_client import (
    PolymarketClient,
    extract_price_to_beat,
    parse_token_ids,
)
from updown.models.market import MarketSnapshot, Side

if TYPE_CHECKING:
    from updown.engine.window import WindowId

log = get_logger(__name__)


def _first_failure(group: ExceptionGroup) -> Exception:
    """Pick the exception to surface when concurrent reads fail."""
    for exc in group.exceptions:
        if isinstance(exc, FetchFailure):
            return exc
    return group.exceptions[0]


class MarketFeed:
    """Fetches event metadata, both order books and the spot price.

    The books and the spot price are read concurrently once the event is
    known. If one read fails the others are cancelled; the snapshot is only
    built after every read has succeeded.
    """

    def __init__(
        self,
        polymarket: PolymarketClient | None = None,
        ticker: BinanceTicker | None = None,
        timeout: float = 8.0,
    ) -> None:
        self._polymarket = polymarket or PolymarketClient()
        self._ticker = ticker or BinanceTicker()
        self._timeout = timeout

    async def fetch_snapshot(self, window_id: WindowId) -> MarketSnapshot:
        """Fetch a snapshot for ``window_id``.

        Raises:
            FetchFailure: On any failed or timed-out read.
            MalformedSnapshot: If the payload lacks market identifiers.
        """
        try:
            return await asyncio.wait_for(self._fetch(window_id), timeout=self._timeout)
        except TimeoutError as exc:
            msg = f"snapshot fetch timed out after {self._timeout}s"
            raise FetchFailure(msg, window_id=window_id.slug, operation="fetch_snapshot") from exc
        except FetchFailure as exc:
            if not exc.window_id:
                exc.window_id = window_id.slug
            raise

    async def _fetch(self, window_id: WindowId) -> MarketSnapshot:
        event = await self._polymarket.get_event(window_id.slug)

        markets = event.get("markets") or []
        if not markets:
            msg = f"Event {window_id.slug} has no markets"
            raise MalformedSnapshot(msg, window_id=window_id.slug, operation="fetch_snapshot")
        market: dict[str, Any] = markets[0]

        condition_id = market.get("conditionId") or market.get("condition_id")
        if not condition_id:
            msg = "Market has no conditionId"
            raise MalformedSnapshot(msg, window_id=window_id.slug, operation="fetch_snapshot")
        yes_token, no_token = parse_token_ids(
            market.get("clobTokenIds") or market.get("clob_token_ids")
        )

        try:
            async with asyncio.TaskGroup() as tg:
                yes_task = tg.create_task(self._polymarket.get_orderbook(yes_token))
                no_task = tg.create_task(self._polymarket.get_orderbook(no_token))
                spot_task = tg.create_task(self._ticker.get_spot_price())
        except ExceptionGroup as group:
            raise _first_failure(group) from None
        book_yes, book_no, spot = yes_task.result(), no_task.result(), spot_task.result()

        tick_raw = market.get("orderPriceMinTickSize", market.get("order_price_min_tick_size"))
        try:
            tick_size = Decimal(str(tick_raw)) if tick_raw is not None else Decimal("0.01")
        except InvalidOperation:
            tick_size = Decimal("0.01")

        return MarketSnapshot(
            window_title=str(event.get("title") or window_id.slug),
            window_id=str(event.get("slug") or window_id.slug),
            event_id=str(event.get("id") or ""),
            condition_id=str(condition_id),
            question=str(market.get("question") or ""),
            tick_size=tick_size,
            neg_risk=bool(market.get("negRisk", market.get("neg_risk", False))),
            token_ids={Side.YES: yes_token, Side.NO: no_token},
            target_price=extract_price_to_beat(event, market),
            spot_price=spot,
            books={Side.YES: book_yes, Side.NO: book_no},
            fetched_at=datetime.now(tz=UTC),
        )

    async def close(self) -> None:
        await self._polymarket.close()
        await self._ticker.close()
