"""Order intents and fill results."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from updown.models.market import Side  # noqa: TCH001


class OrderAction(str, Enum):
    BUY = "buy"
    SELL = "sell"


class FillStatus(str, Enum):
    FILLED = "FILLED"
    REJECTED = "REJECTED"


class RejectReason(str, Enum):
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_POSITION = "insufficient_position"
    INVALID_ORDER = "invalid_order"
    LIVE_NOT_IMPLEMENTED = "live_not_implemented"


class OrderIntent(BaseModel):
    """What a strategy wants done: buy or sell ``size`` of ``side`` at ``price``."""

    side: Side
    action: OrderAction
    price: Decimal = Field(gt=0)
    size: Decimal = Field(gt=0)

    @property
    def notional(self) -> Decimal:
        return self.price * self.size

    model_config = {"frozen": True}


class Fill(BaseModel):
    """Outcome of routing one order intent.

    ``cost`` is the signed balance change seen from the trader: positive for
    a buy's debit, negative for a sell's proceeds, zero when rejected.
    """

    side: Side
    action: OrderAction
    price: Decimal
    size: Decimal
    status: FillStatus
    cost: Decimal = Decimal("0")
    reason: RejectReason | None = None
    message: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def filled(self) -> bool:
        return self.status is FillStatus.FILLED

    model_config = {"frozen": True}
