"""Data layer: Polymarket and Binance reads behind one snapshot feed."""

from __future__ import annotations

from updown.data.binance_ticker import BinanceTicker
from updown.data.market_feed import MarketFeed
from updown.data.polymarket_client import PolymarketClient

__all__ = [
    "BinanceTicker",
    "MarketFeed",
    "PolymarketClient",
]
