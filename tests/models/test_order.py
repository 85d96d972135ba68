"""Tests for order intents and fills."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from updown.models.market import Side
from updown.models.order import Fill, FillStatus, OrderAction, OrderIntent, RejectReason


class TestOrderIntent:
    def test_notional(self) -> None:
        intent = OrderIntent(
            side=Side.YES, action=OrderAction.BUY, price=Decimal("0.96"), size=Decimal("10"),
        )
        assert intent.notional == Decimal("9.60")

    @pytest.mark.parametrize(("price", "size"), [("0", "1"), ("0.5", "0"), ("-1", "1")])
    def test_rejects_non_positive(self, price: str, size: str) -> None:
        with pytest.raises(ValidationError):
            OrderIntent(
                side=Side.NO, action=OrderAction.BUY, price=Decimal(price), size=Decimal(size),
            )

    def test_parses_string_enums(self) -> None:
        intent = OrderIntent(side="no", action="sell", price="0.4", size="2")
        assert intent.side is Side.NO
        assert intent.action is OrderAction.SELL


class TestFill:
    def test_filled_flag(self) -> None:
        fill = Fill(
            side=Side.YES, action=OrderAction.BUY, price=Decimal("0.5"), size=Decimal("1"),
            status=FillStatus.FILLED, cost=Decimal("0.5"),
        )
        assert fill.filled is True
        assert fill.reason is None

    def test_rejected_fill(self) -> None:
        fill = Fill(
            side=Side.YES, action=OrderAction.SELL, price=Decimal("0.5"), size=Decimal("1"),
            status=FillStatus.REJECTED, reason=RejectReason.INSUFFICIENT_POSITION,
        )
        assert fill.filled is False
        assert fill.cost == Decimal("0")
