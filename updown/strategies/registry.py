"""Strategy registry.

Strategy modules register their class under the name used by ``bot.strategy``
in config and by ``updown --strategy``. The orchestrator imports the modules,
then builds the configured strategy with :func:`create`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from updown.config.loader import ConfigLoader
    from updown.strategies.base import BaseStrategy

_REGISTRY: dict[str, type[BaseStrategy]] = {}


def register(name: str) -> Any:
    """Class decorator that makes a strategy selectable as ``name``.

    A later registration under the same name replaces the earlier one.
    """

    def decorator(cls: type[BaseStrategy]) -> type[BaseStrategy]:
        _REGISTRY[name] = cls
        return cls

    return decorator


def get(name: str) -> type[BaseStrategy]:
    """Look up the class registered as ``name``.

    Raises:
        KeyError: If nothing is registered under ``name``; the message lists
            the names that are.
    """
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        msg = f"Unknown strategy '{name}'. Available: {available}"
        raise KeyError(msg)
    return _REGISTRY[name]


def create(name: str, config: ConfigLoader) -> BaseStrategy:
    """Build the strategy registered as ``name``, reading its params from ``config``.

    The instance's ``strategy_id`` is the registered name, so log lines from
    the strategy carry the same name the operator selected.
    """
    return get(name)(config=config, strategy_id=name)


def list_strategies() -> list[str]:
    return sorted(_REGISTRY.keys())
