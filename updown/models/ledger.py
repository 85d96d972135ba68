"""Ledger read-out models and round-close results."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from updown.models.market import Side  # noqa: TCH001


class PositionState(BaseModel):
    """Holdings on one side. ``avg_price`` is zero whenever ``size`` is zero."""

    size: Decimal = Decimal("0")
    avg_price: Decimal = Decimal("0")

    model_config = {"frozen": True}


class LedgerSnapshot(BaseModel):
    """Copy of the paper ledger's balance and both positions."""

    balance: Decimal
    positions: dict[Side, PositionState] = Field(default_factory=dict)

    def position(self, side: Side) -> PositionState:
        return self.positions.get(side, PositionState())

    model_config = {"frozen": True}


class Settlement(BaseModel):
    """Result of paying out a round: up iff closing >= target."""

    pnl: Decimal
    resolved_up: bool

    model_config = {"frozen": True}


class RoundClose(BaseModel):
    """What happened to the previous round when the window rolled over.

    ``settled`` is False when no target was ever recorded for the closing
    round or no spot price was available to close it; positions are then
    carried forward untouched and ``reason`` says why.
    """

    window_id: str
    next_window_id: str
    settled: bool
    target_price: Decimal | None = None
    closing_price: Decimal | None = None
    pnl: Decimal | None = None
    resolved_up: bool | None = None
    reason: str = ""

    model_config = {"frozen": True}
