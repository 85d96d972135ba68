"""High-confidence late entry.

Once per round, in the final minute: if either side's best ask is at or
above the confidence threshold, buy that side with a fixed fraction of the
balance, rounded down to a 0.01-share step. When both sides clear, the
higher price wins; an exact tie goes to YES.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import TYPE_CHECKING

from updown.models.market import Side
from updown.models.order import OrderAction, OrderIntent
from updown.strategies.base import BaseStrategy, StrategyContext
from updown.strategies.registry import register

if TYPE_CHECKING:
    from updown.config.loader import ConfigLoader
    from updown.models.market import MarketSnapshot

DEFAULT_THRESHOLD = Decimal("0.95")
DEFAULT_ALLOCATION = Decimal("0.20")
SIZE_STEP = Decimal("0.01")


@register("high_confidence")
class HighConfidenceStrategy(BaseStrategy):
    def __init__(self, config: ConfigLoader, strategy_id: str | None = None) -> None:
        super().__init__(config, strategy_id)
        self._threshold = Decimal(
            str(self.get_config("strategy.high_confidence.threshold", DEFAULT_THRESHOLD))
        )
        self._allocation = Decimal(
            str(self.get_config("strategy.high_confidence.allocation", DEFAULT_ALLOCATION))
        )

    @property
    def threshold(self) -> Decimal:
        return self._threshold

    @property
    def allocation(self) -> Decimal:
        return self._allocation

    def decide(
        self,
        snapshot: MarketSnapshot,
        context: StrategyContext,
    ) -> list[OrderIntent]:
        if not context.within_terminal_window or context.balance <= 0:
            return []

        yes_ask = snapshot.best_ask(Side.YES)
        no_ask = snapshot.best_ask(Side.NO)
        if yes_ask is None or no_ask is None:
            return []

        if yes_ask.price >= self._threshold and yes_ask.price >= no_ask.price:
            side, price = Side.YES, yes_ask.price
        elif no_ask.price >= self._threshold:
            side, price = Side.NO, no_ask.price
        else:
            return []

        budget = self._allocation * context.balance
        size = (budget / price).quantize(SIZE_STEP, rounding=ROUND_DOWN)
        if price * size > context.balance:
            size -= SIZE_STEP
        if size <= 0:
            return []
        return [OrderIntent(side=side, action=OrderAction.BUY, price=price, size=size)]
