"""Structured logging for the up/down watcher.

JSON output in production, colored console otherwise, both via structlog.
Order submissions, fills and rejections also go to the audit logger.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, cast

import structlog


def _configure_structlog() -> None:
    """Configure structlog based on UPDOWN_ENV and UPDOWN_LOG_LEVEL."""
    env = os.environ.get("UPDOWN_ENV", "development")
    log_level_name = os.environ.get("UPDOWN_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(log_level_name)
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if env == "production":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _LOG_LEVELS["current"] = log_level_name


_LOG_LEVELS: dict[str, str] = {"current": "INFO"}
_CONFIGURED = False


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance.

    Args:
        name: Logger name (typically module __name__).

    Returns:
        Configured structlog logger.
    """
    global _CONFIGURED
    if not _CONFIGURED:
        _configure_structlog()
        _CONFIGURED = True

    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def get_audit_logger() -> structlog.stdlib.BoundLogger:
    """Get the audit trail logger for orders, fills and rejections."""
    return get_logger("updown.audit")


def log_order_event(
    action: str,
    window_id: str,
    **kwargs: Any,
) -> None:
    """Log an order lifecycle event to the audit trail.

    Args:
        action: Event type (paper_fill, paper_rejected, live_submit, ...).
        window_id: Slug of the round the order belongs to.
        **kwargs: Additional context (side, price, size, reason, ...).
    """
    logger = get_audit_logger()
    logger.info(
        "order_event",
        event_type="audit",
        action=action,
        window_id=window_id,
        **kwargs,
    )
