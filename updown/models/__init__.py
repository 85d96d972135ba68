from updown.models.ledger import LedgerSnapshot, PositionState, RoundClose, Settlement
from updown.models.market import MarketSnapshot, OrderBookLevel, OrderBookSnapshot, Side
from updown.models.order import Fill, FillStatus, OrderAction, OrderIntent, RejectReason

__all__ = [
    "Fill",
    "FillStatus",
    "LedgerSnapshot",
    "MarketSnapshot",
    "OrderAction",
    "OrderBookLevel",
    "OrderBookSnapshot",
    "OrderIntent",
    "PositionState",
    "RejectReason",
    "RoundClose",
    "Settlement",
    "Side",
]
