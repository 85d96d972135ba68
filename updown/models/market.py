"""Market data models: order book levels, books and per-poll snapshots."""

from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Side(str, Enum):
    """Outcome leg of a round. YES pays out when the round resolves up."""

    YES = "yes"
    NO = "no"


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


class OrderBookLevel(BaseModel):
    """Single price level in an order book."""

    price: Decimal
    size: Decimal

    model_config = {"frozen": True}

    @classmethod
    def from_raw(cls, raw: Any) -> OrderBookLevel | None:
        """Normalize a level given as ``{"price", "size"}`` or ``[price, size]``.

        Returns None when the level has no usable price.
        """
        if isinstance(raw, dict):
            price, size = raw.get("price"), raw.get("size")
        elif isinstance(raw, (list, tuple)):
            price = raw[0] if len(raw) > 0 else None
            size = raw[1] if len(raw) > 1 else None
        else:
            price, size = raw, None

        dec_price = _to_decimal(price)
        if dec_price is None:
            return None
        dec_size = _to_decimal(size)
        return cls(price=dec_price, size=dec_size if dec_size is not None else Decimal("0"))


class OrderBookSnapshot(BaseModel):
    """Point-in-time snapshot of one outcome token's order book."""

    bids: list[OrderBookLevel] = Field(default_factory=list)
    asks: list[OrderBookLevel] = Field(default_factory=list)
    timestamp: datetime
    token_id: str = ""

    @property
    def best_bid(self) -> OrderBookLevel | None:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> OrderBookLevel | None:
        return self.asks[0] if self.asks else None

    model_config = {"frozen": True}


class MarketSnapshot(BaseModel):
    """Everything one poll knows about the current round.

    ``books`` holds None for a side whose book is unavailable (e.g. the
    market has closed and the CLOB returns 404).
    """

    window_title: str
    window_id: str
    event_id: str = ""
    condition_id: str = ""
    question: str = ""
    tick_size: Decimal = Decimal("0.01")
    neg_risk: bool = False
    token_ids: dict[Side, str] = Field(default_factory=dict)
    target_price: Decimal | None = None
    spot_price: Decimal | None = None
    books: dict[Side, OrderBookSnapshot | None] = Field(default_factory=dict)
    fetched_at: datetime

    model_config = {"frozen": True}

    def book(self, side: Side) -> OrderBookSnapshot | None:
        return self.books.get(side)

    def best_ask(self, side: Side) -> OrderBookLevel | None:
        book = self.books.get(side)
        return book.best_ask if book is not None else None
