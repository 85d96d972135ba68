"""Paper ledger: simulated balance and YES/NO positions for one round at a time."""

from __future__ import annotations

import threading
from decimal import Decimal

from updown.core.logging import get_logger, log_order_event
from updown.models.ledger import LedgerSnapshot, PositionState, Settlement
from updown.models.market import Side
from updown.models.order import Fill, FillStatus, OrderAction, OrderIntent, RejectReason

logger = get_logger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")


class PaperLedger:
    """Simulated fills at the quoted price against an in-memory balance.

    Every operation either applies completely or leaves state untouched and
    returns a rejected ``Fill``. Mutations run under a lock so the contract
    holds even if two callers race.
    """

    def __init__(self, initial_balance: Decimal = Decimal("1000")) -> None:
        if initial_balance < 0:
            msg = f"initial_balance must be >= 0, got {initial_balance}"
            raise ValueError(msg)
        self._initial_balance = initial_balance
        self._balance = initial_balance
        self._positions: dict[Side, PositionState] = {
            Side.YES: PositionState(),
            Side.NO: PositionState(),
        }
        self._lock = threading.Lock()

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    @property
    def pnl(self) -> Decimal:
        return self._balance - self._initial_balance

    def position(self, side: Side) -> PositionState:
        return self._positions[side]

    def apply(self, intent: OrderIntent, window_id: str = "") -> Fill:
        """Route an order intent to the matching buy/sell operation."""
        if intent.action is OrderAction.BUY:
            return self.place_buy(intent.side, intent.price, intent.size, window_id=window_id)
        return self.place_sell(intent.side, intent.price, intent.size, window_id=window_id)

    def place_buy(
        self,
        side: Side,
        price: Decimal,
        size: Decimal,
        window_id: str = "",
    ) -> Fill:
        if price <= 0 or size <= 0:
            return self._reject(
                side, OrderAction.BUY, price, size, RejectReason.INVALID_ORDER,
                "price and size must be positive", window_id,
            )

        with self._lock:
            cost = price * size
            if cost > self._balance:
                return self._reject(
                    side, OrderAction.BUY, price, size, RejectReason.INSUFFICIENT_BALANCE,
                    f"need {cost:.2f} USDC, have {self._balance:.2f}", window_id,
                )

            pos = self._positions[side]
            new_size = pos.size + size
            if pos.size == 0:
                new_avg = price
            else:
                new_avg = (pos.size * pos.avg_price + size * price) / new_size
            self._balance -= cost
            self._positions[side] = PositionState(size=new_size, avg_price=new_avg)
            balance = self._balance

        log_order_event(
            "paper_fill", window_id,
            side=side.value, order_action="buy", price=str(price), size=str(size),
            cost=str(cost), balance=str(balance),
        )
        logger.info(
            "paper_buy_filled",
            side=side.value,
            size=f"{size:.2f}",
            price=str(price),
            cost=f"{cost:.2f}",
            position_size=f"{new_size:.2f}",
            avg_price=f"{new_avg:.4f}",
        )
        return Fill(
            side=side,
            action=OrderAction.BUY,
            price=price,
            size=size,
            status=FillStatus.FILLED,
            cost=cost,
        )

    def place_sell(
        self,
        side: Side,
        price: Decimal,
        size: Decimal,
        window_id: str = "",
    ) -> Fill:
        if price <= 0 or size <= 0:
            return self._reject(
                side, OrderAction.SELL, price, size, RejectReason.INVALID_ORDER,
                "price and size must be positive", window_id,
            )

        with self._lock:
            pos = self._positions[side]
            if size > pos.size:
                return self._reject(
                    side, OrderAction.SELL, price, size, RejectReason.INSUFFICIENT_POSITION,
                    f"have {pos.size:.2f} {side.value}", window_id,
                )

            proceeds = price * size
            remaining = pos.size - size
            self._balance += proceeds
            self._positions[side] = PositionState(
                size=remaining,
                avg_price=pos.avg_price if remaining > 0 else _ZERO,
            )
            balance = self._balance

        log_order_event(
            "paper_fill", window_id,
            side=side.value, order_action="sell", price=str(price), size=str(size),
            proceeds=str(proceeds), balance=str(balance),
        )
        logger.info(
            "paper_sell_filled",
            side=side.value,
            size=f"{size:.2f}",
            price=str(price),
            proceeds=f"{proceeds:.2f}",
            position_size=f"{remaining:.2f}",
        )
        return Fill(
            side=side,
            action=OrderAction.SELL,
            price=price,
            size=size,
            status=FillStatus.FILLED,
            cost=-proceeds,
        )

    def settle_round(self, closing_price: Decimal, target_price: Decimal) -> Settlement:
        """Pay out both sides against the target and clear all positions.

        YES pays 1 per unit if closing >= target, NO pays 1 per unit otherwise.
        """
        resolved_up = closing_price >= target_price
        with self._lock:
            yes_size = self._positions[Side.YES].size
            no_size = self._positions[Side.NO].size
            pnl = yes_size * (_ONE if resolved_up else _ZERO) + no_size * (
                _ZERO if resolved_up else _ONE
            )
            self._balance += pnl
            self._positions = {Side.YES: PositionState(), Side.NO: PositionState()}
            balance = self._balance

        logger.info(
            "paper_round_settled",
            resolved="up" if resolved_up else "down",
            closing_price=str(closing_price),
            target_price=str(target_price),
            pnl=f"{pnl:.2f}",
            balance=f"{balance:.2f}",
        )
        return Settlement(pnl=pnl, resolved_up=resolved_up)

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(balance=self._balance, positions=dict(self._positions))

    def reset(self) -> None:
        with self._lock:
            self._balance = self._initial_balance
            self._positions = {Side.YES: PositionState(), Side.NO: PositionState()}
        logger.info("paper_ledger_reset", balance=str(self._initial_balance))

    def _reject(
        self,
        side: Side,
        action: OrderAction,
        price: Decimal,
        size: Decimal,
        reason: RejectReason,
        message: str,
        window_id: str,
    ) -> Fill:
        log_order_event(
            "paper_rejected", window_id,
            side=side.value, order_action=action.value, price=str(price), size=str(size),
            reason=reason.value, detail=message,
        )
        return Fill(
            side=side,
            action=action,
            price=price,
            size=size,
            status=FillStatus.REJECTED,
            reason=reason,
            message=message,
        )
