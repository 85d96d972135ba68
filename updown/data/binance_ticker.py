"""Binance spot ticker: reference BTC price for fallback targets and closes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import httpx

from updown.core.logging import get_logger

log = get_logger(__name__)

BINANCE_TICKER_URL = "https://api.binance.com/api/v3/ticker/price"


class BinanceTicker:
    """Reads the latest price for one symbol.

    The spot price is optional in a snapshot, so every failure here yields
    None instead of aborting the poll.
    """

    def __init__(
        self,
        ticker_url: str = BINANCE_TICKER_URL,
        symbol: str = "BTCUSDT",
        timeout: float = 5.0,
    ) -> None:
        self._ticker_url = ticker_url
        self._symbol = symbol.upper()
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def symbol(self) -> str:
        return self._symbol

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def get_spot_price(self) -> Decimal | None:
        client = await self._get_client()
        try:
            resp = await client.get(self._ticker_url, params={"symbol": self._symbol})
            if resp.status_code != 200:
                log.warning("spot_price_http_error", status=resp.status_code, symbol=self._symbol)
                return None
            raw = resp.json().get("price")
            price = Decimal(str(raw))
        except (httpx.HTTPError, ValueError, AttributeError, InvalidOperation) as exc:
            log.warning("spot_price_unavailable", symbol=self._symbol, error=str(exc))
            return None
        return price if price.is_finite() else None

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
