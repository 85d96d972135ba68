"""Round lifecycle controller.

Each poll runs through the same fixed sequence:

1. create the round record on first sighting,
2. cache the fallback target (first spot price seen, never overwritten),
3. resolve the effective target,
4. detect rollover and settle (or report unsettled) the previous round,
5. skip everything else if this round was already acted upon,
6. otherwise ask the strategy and route any orders, marking the round.

The controller is synchronous and is the only caller of ledger mutations.
Callers that poll more than one event in parallel must serialize
``process_poll`` per round themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from updown.core.logging import get_logger
from updown.models.ledger import RoundClose
from updown.models.order import Fill, FillStatus, RejectReason
from updown.strategies.base import StrategyContext

if TYPE_CHECKING:
    from updown.engine.window import WindowClock, WindowId
    from updown.execution.paper_ledger import PaperLedger
    from updown.interfaces import OrderRouter
    from updown.models.market import MarketSnapshot
    from updown.models.order import OrderIntent
    from updown.strategies.base import BaseStrategy

logger = get_logger(__name__)


@dataclass
class RoundRecord:
    """Per-round state: the action gate and the two target sources."""

    action_taken: bool = False
    fallback_target: Decimal | None = None
    authoritative_target: Decimal | None = None

    @property
    def target(self) -> Decimal | None:
        if self.authoritative_target is not None:
            return self.authoritative_target
        return self.fallback_target


@dataclass
class PollOutcome:
    """Everything one poll decided, for logging and tests."""

    window_id: WindowId
    effective_target: Decimal | None
    within_terminal_window: bool
    round_close: RoundClose | None = None
    gated: bool = False
    orders: list[OrderIntent] = field(default_factory=list)
    fills: list[Fill] = field(default_factory=list)

    @property
    def acted(self) -> bool:
        return bool(self.orders)


class LifecycleController:
    """Drives one round after another through detection, settlement and the gate.

    Exactly one of ``ledger`` (paper mode) or ``router`` (live mode) is
    expected. In live mode round closes are reported but nothing is settled.
    """

    def __init__(
        self,
        clock: WindowClock,
        strategy: BaseStrategy,
        ledger: PaperLedger | None = None,
        router: OrderRouter | None = None,
    ) -> None:
        if ledger is None and router is None:
            msg = "LifecycleController needs a ledger (paper) or a router (live)"
            raise ValueError(msg)
        self._clock = clock
        self._strategy = strategy
        self._ledger = ledger
        self._router = router
        self._last_window_id: WindowId | None = None
        self._rounds: dict[WindowId, RoundRecord] = {}

    @property
    def last_window_id(self) -> WindowId | None:
        return self._last_window_id

    @property
    def ledger(self) -> PaperLedger | None:
        return self._ledger

    def round_record(self, window_id: WindowId) -> RoundRecord | None:
        return self._rounds.get(window_id)

    def tracked_rounds(self) -> list[WindowId]:
        return list(self._rounds)

    def current_window_id(self, now: float | None = None) -> WindowId:
        return self._clock.current_window_id(now)

    def process_poll(
        self,
        window_id: WindowId,
        snapshot: MarketSnapshot,
        now: float | None = None,
    ) -> PollOutcome:
        """Run one poll's lifecycle step for the round ``window_id``.

        ``snapshot`` must have been fetched for ``window_id``. Nothing here
        performs I/O; all ledger effects happen before this returns.
        """
        record = self._rounds.get(window_id)
        if record is None:
            record = RoundRecord()
            self._rounds[window_id] = record
            logger.info("round_observed", window_id=window_id.slug, start_ts=window_id.start_ts)

        if record.fallback_target is None and snapshot.spot_price is not None:
            record.fallback_target = snapshot.spot_price
            logger.info(
                "round_fallback_target",
                window_id=window_id.slug,
                target=str(snapshot.spot_price),
            )
        if record.authoritative_target is None and snapshot.target_price is not None:
            record.authoritative_target = snapshot.target_price

        if snapshot.target_price is not None:
            effective_target: Decimal | None = snapshot.target_price
        else:
            effective_target = record.target

        round_close = None
        if self._last_window_id is not None and window_id != self._last_window_id:
            round_close = self._close_round(self._last_window_id, window_id, snapshot)
        self._last_window_id = window_id

        within_terminal = self._clock.within_terminal_window(window_id, now)
        outcome = PollOutcome(
            window_id=window_id,
            effective_target=effective_target,
            within_terminal_window=within_terminal,
            round_close=round_close,
        )

        if record.action_taken:
            outcome.gated = True
            return outcome

        balance = self._ledger.balance if self._ledger is not None else Decimal("0")
        context = StrategyContext(balance=balance, within_terminal_window=within_terminal)
        orders = self._strategy.decide(snapshot, context)
        if not orders:
            return outcome

        record.action_taken = True
        outcome.orders = list(orders)
        for intent in orders:
            fill = self._route(intent, window_id, snapshot)
            outcome.fills.append(fill)
            if not fill.filled:
                logger.warning(
                    "order_dropped",
                    window_id=window_id.slug,
                    side=intent.side.value,
                    order_action=intent.action.value,
                    price=str(intent.price),
                    size=f"{intent.size:.2f}",
                    reason=fill.reason.value if fill.reason else "",
                    detail=fill.message,
                )
        return outcome

    def _route(self, intent: OrderIntent, window_id: WindowId, snapshot: MarketSnapshot) -> Fill:
        if self._ledger is not None:
            return self._ledger.apply(intent, window_id=window_id.slug)
        if self._router is not None:
            return self._router.submit(intent, snapshot)
        return Fill(
            side=intent.side,
            action=intent.action,
            price=intent.price,
            size=intent.size,
            status=FillStatus.REJECTED,
            reason=RejectReason.INVALID_ORDER,
            message="no execution path configured",
        )

    def _close_round(
        self,
        previous: WindowId,
        current: WindowId,
        snapshot: MarketSnapshot,
    ) -> RoundClose:
        record = self._rounds.pop(previous, None)
        target = record.target if record is not None else None
        closing = snapshot.spot_price

        if self._ledger is None:
            reason = "live_mode"
        elif target is None:
            reason = "no_target_recorded"
        elif closing is None:
            reason = "no_closing_price"
        else:
            settlement = self._ledger.settle_round(closing, target)
            logger.info(
                "round_settled",
                window_id=previous.slug,
                next_window_id=current.slug,
                resolved="up" if settlement.resolved_up else "down",
                pnl=f"{settlement.pnl:+.2f}",
                balance=f"{self._ledger.balance:.2f}",
            )
            return RoundClose(
                window_id=previous.slug,
                next_window_id=current.slug,
                settled=True,
                target_price=target,
                closing_price=closing,
                pnl=settlement.pnl,
                resolved_up=settlement.resolved_up,
            )

        if reason == "live_mode":
            logger.info("round_closed", window_id=previous.slug, next_window_id=current.slug)
        else:
            logger.warning(
                "round_unsettled",
                window_id=previous.slug,
                next_window_id=current.slug,
                reason=reason,
                target=str(target) if target is not None else None,
            )
        return RoundClose(
            window_id=previous.slug,
            next_window_id=current.slug,
            settled=False,
            target_price=target,
            closing_price=closing,
            reason=reason,
        )
