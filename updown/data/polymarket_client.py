"""Polymarket REST client: Gamma event metadata and CLOB order books."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from updown.core.errors import FetchFailure, MalformedSnapshot
from updown.core.logging import get_logger
from updown.models.market import OrderBookLevel, OrderBookSnapshot

log = get_logger(__name__)

GAMMA_API_URL = "https://gamma-api.polymarket.com"
CLOB_API_URL = "https://clob.polymarket.com"

_NUMERIC_ID = re.compile(r"^\d+$")


def parse_token_ids(raw: Any) -> tuple[str, str]:
    """Parse ``clobTokenIds`` into ``(yes_token, no_token)``.

    Gamma sends a JSON-encoded array string; older payloads use a plain list
    or a comma-separated string.

    Raises:
        MalformedSnapshot: If fewer than two ids are present.
    """
    if raw is None or raw == "":
        msg = "Market has no clobTokenIds"
        raise MalformedSnapshot(msg, operation="parse_token_ids")

    if isinstance(raw, (list, tuple)):
        ids = [str(x) for x in raw]
    else:
        text = str(raw).strip()
        ids = []
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                ids = [str(x) for x in parsed]
        if not ids:
            ids = [
                s.strip().strip("[]").strip().strip("\"'")
                for s in text.split(",")
            ]
            ids = [s for s in ids if s]

    if len(ids) < 2:
        msg = "Expected at least two token IDs (Yes, No)"
        raise MalformedSnapshot(msg, operation="parse_token_ids")
    return ids[0], ids[1]


def extract_price_to_beat(event: dict[str, Any], market: dict[str, Any]) -> Decimal | None:
    """Pull the round's target price from event or market metadata.

    Both camelCase and snake_case keys appear in Gamma payloads.
    """
    for source in (event, market):
        meta = source.get("eventMetadata") or source.get("event_metadata") or {}
        if not isinstance(meta, dict):
            continue
        raw = meta.get("priceToBeat")
        if raw is None:
            raw = meta.get("price_to_beat")
        if raw is None:
            continue
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, ValueError):
            return None
        return value if value.is_finite() else None
    return None


def _parse_levels(raw_levels: Any) -> list[OrderBookLevel]:
    if not isinstance(raw_levels, list):
        return []
    levels = [OrderBookLevel.from_raw(raw) for raw in raw_levels]
    return [lvl for lvl in levels if lvl is not None]


class PolymarketClient:
    """Async REST client for the Gamma and CLOB APIs."""

    def __init__(
        self,
        gamma_url: str = GAMMA_API_URL,
        clob_url: str = CLOB_API_URL,
        timeout: float = 5.0,
    ) -> None:
        self._gamma_url = gamma_url.rstrip("/")
        self._clob_url = clob_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def _get_json(self, url: str, operation: str, **params: Any) -> Any:
        client = await self._get_client()
        try:
            resp = await client.get(url, params=params or None)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            msg = f"{operation}: HTTP {exc.response.status_code} for {url}"
            raise FetchFailure(msg, operation=operation) from exc
        except httpx.HTTPError as exc:
            msg = f"{operation}: {exc.__class__.__name__} for {url}"
            raise FetchFailure(msg, operation=operation) from exc
        except ValueError as exc:
            msg = f"{operation}: invalid JSON from {url}"
            raise FetchFailure(msg, operation=operation) from exc

    async def get_event(self, event_id_or_slug: str) -> dict[str, Any]:
        """Fetch an event by numeric id or by slug.

        Raises:
            FetchFailure: On transport or HTTP errors.
            MalformedSnapshot: If no event matches the slug.
        """
        key = str(event_id_or_slug).strip()
        if _NUMERIC_ID.match(key):
            event = await self._get_json(f"{self._gamma_url}/events/{key}", "get_event")
        else:
            events = await self._get_json(f"{self._gamma_url}/events", "get_event", slug=key)
            if not isinstance(events, list) or not events:
                msg = f"No event found for slug: {key}"
                raise MalformedSnapshot(msg, window_id=key, operation="get_event")
            event = events[0]

        if not isinstance(event, dict):
            msg = f"Unexpected event payload for {key}"
            raise MalformedSnapshot(msg, window_id=key, operation="get_event")
        return event

    async def get_orderbook(self, token_id: str) -> OrderBookSnapshot | None:
        """Fetch the order book for a token; None if the book is gone (404)."""
        client = await self._get_client()
        url = f"{self._clob_url}/book"
        try:
            resp = await client.get(url, params={"token_id": token_id})
        except httpx.HTTPError as exc:
            msg = f"get_orderbook: {exc.__class__.__name__} for token {token_id}"
            raise FetchFailure(msg, operation="get_orderbook") from exc

        if resp.status_code == 404:
            log.debug("orderbook_unavailable", token_id=token_id)
            return None
        try:
            resp.raise_for_status()
            data: dict[str, Any] = resp.json()
        except httpx.HTTPStatusError as exc:
            msg = f"get_orderbook: HTTP {resp.status_code} for token {token_id}"
            raise FetchFailure(msg, operation="get_orderbook") from exc
        except ValueError as exc:
            msg = f"get_orderbook: invalid JSON for token {token_id}"
            raise FetchFailure(msg, operation="get_orderbook") from exc

        return OrderBookSnapshot(
            bids=_parse_levels(data.get("bids")),
            asks=_parse_levels(data.get("asks")),
            timestamp=datetime.now(tz=UTC),
            token_id=token_id,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
