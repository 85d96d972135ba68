"""Live order router: placeholder for CLOB order signing and submission."""

from __future__ import annotations

from typing import TYPE_CHECKING

from updown.core.logging import get_logger, log_order_event
from updown.models.order import Fill, FillStatus, RejectReason

if TYPE_CHECKING:
    from updown.models.market import MarketSnapshot
    from updown.models.order import OrderIntent

logger = get_logger(__name__)


class LiveOrderRouter:
    """Logs the order that would be sent and reports it unfilled.

    Orders are never signed or posted; every submission comes back as a
    rejected fill with reason ``LIVE_NOT_IMPLEMENTED``.
    """

    def submit(self, intent: OrderIntent, snapshot: MarketSnapshot) -> Fill:
        token_id = snapshot.token_ids.get(intent.side, "")
        log_order_event(
            "live_submit", snapshot.window_id,
            side=intent.side.value, order_action=intent.action.value,
            price=str(intent.price), size=str(intent.size), token_id=token_id,
            condition_id=snapshot.condition_id,
        )
        logger.warning(
            "live_order_not_implemented",
            order_action=intent.action.value,
            side=intent.side.value,
            size=f"{intent.size:.2f}",
            price=str(intent.price),
            token_id=token_id,
        )
        return Fill(
            side=intent.side,
            action=intent.action,
            price=intent.price,
            size=intent.size,
            status=FillStatus.REJECTED,
            reason=RejectReason.LIVE_NOT_IMPLEMENTED,
            message="live order placement is not implemented",
        )
