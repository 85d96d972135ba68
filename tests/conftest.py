"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from pathlib import Path  # noqa: TCH003
from typing import Any

import pytest

from updown.config.loader import ConfigLoader
from updown.models.market import MarketSnapshot, OrderBookLevel, OrderBookSnapshot, Side

# 2026-02-23 02:35:00 UTC, aligned to a 5-minute boundary
ROUND_START = 1771814100


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    """Create a temp config directory with default.toml."""
    config = tmp_path / "config"
    config.mkdir()

    default_toml = config / "default.toml"
    default_toml.write_text(
        """\
[bot]
poll_interval_seconds = 10
fetch_timeout_seconds = 8
strategy = "high_confidence"

[paper]
initial_balance = 1000

[window]
period_seconds = 300
terminal_seconds = 60
slug_prefix = "btc-updown-5m"

[strategy.high_confidence]
threshold = 0.95
allocation = 0.20

[audit]
csv_path = ""

[polymarket]
gamma_url = "https://gamma-api.polymarket.com"
clob_url = "https://clob.polymarket.com"
request_timeout_seconds = 5

[binance]
ticker_url = "https://api.binance.com/api/v3/ticker/price"
symbol = "BTCUSDT"
"""
    )
    return config


@pytest.fixture()
def config_loader(config_dir: Path) -> ConfigLoader:
    """ConfigLoader with test config."""
    loader = ConfigLoader(config_dir=config_dir, env="test")
    loader.load()
    return loader


def _book(ask: str | None, ask_size: str = "100", bid: str | None = None) -> OrderBookSnapshot:
    asks = [OrderBookLevel(price=Decimal(ask), size=Decimal(ask_size))] if ask else []
    bids = [OrderBookLevel(price=Decimal(bid), size=Decimal("50"))] if bid else []
    return OrderBookSnapshot(
        bids=bids,
        asks=asks,
        timestamp=datetime(2026, 2, 23, 2, 39, 0),
    )


@pytest.fixture()
def make_snapshot() -> Callable[..., MarketSnapshot]:
    """Factory for snapshots: asks per side, optional target and spot.

    Pass ``yes_ask=None`` / ``no_ask=None`` for an empty book, or
    ``missing=Side.NO`` to drop a side's book entirely.
    """

    def _make(
        slug: str = f"btc-updown-5m-{ROUND_START}",
        yes_ask: str | None = "0.50",
        no_ask: str | None = "0.50",
        target: str | None = None,
        spot: str | None = None,
        missing: Side | None = None,
        **extra: Any,
    ) -> MarketSnapshot:
        books: dict[Side, OrderBookSnapshot | None] = {
            Side.YES: _book(yes_ask),
            Side.NO: _book(no_ask),
        }
        if missing is not None:
            books[missing] = None
        return MarketSnapshot(
            window_title="Bitcoin Up or Down - 5 minute",
            window_id=slug,
            condition_id="0xcond",
            token_ids={Side.YES: "tok-yes", Side.NO: "tok-no"},
            target_price=Decimal(target) if target is not None else None,
            spot_price=Decimal(spot) if spot is not None else None,
            books=books,
            fetched_at=datetime(2026, 2, 23, 2, 39, 0),
            **extra,
        )

    return _make
