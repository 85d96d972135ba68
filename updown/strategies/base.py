"""Base strategy abstract class: all strategies must inherit from this."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from updown.config.loader import ConfigLoader
    from updown.models.market import MarketSnapshot
    from updown.models.order import OrderIntent


class StrategyContext(BaseModel):
    """Execution context handed to a strategy on each poll."""

    balance: Decimal = Decimal("0")
    within_terminal_window: bool = False

    model_config = {"frozen": True}


class BaseStrategy(ABC):
    """Abstract base class for all trading strategies.

    A strategy is a pure decision: it reads the snapshot and context and
    returns order intents. It must not mutate anything or keep state between
    calls, and it must return ``[]`` rather than raise when a book is missing.
    """

    REQUIRED_PARAMS: ClassVar[list[str]] = []

    def __init__(self, config: ConfigLoader, strategy_id: str | None = None) -> None:
        self._config = config
        self.strategy_id = strategy_id or self.__class__.__name__
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate that all required params exist in config."""
        if self.REQUIRED_PARAMS:
            self._config.validate_keys(self.REQUIRED_PARAMS)

    @abstractmethod
    def decide(
        self,
        snapshot: MarketSnapshot,
        context: StrategyContext,
    ) -> list[OrderIntent]:
        """Decide what to do for this poll.

        Args:
            snapshot: Current market snapshot for the round.
            context: Balance and whether the poll is inside the terminal window.

        Returns:
            Order intents (empty if no opportunity).
        """
        ...

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)
