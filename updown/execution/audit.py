"""Audit logger: append-only CSV row per poll."""

from __future__ import annotations

import csv
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from updown.core.logging import get_logger
from updown.engine.window import timestamp_from_slug
from updown.models.market import Side

if TYPE_CHECKING:
    from decimal import Decimal

    from updown.models.market import MarketSnapshot

logger = get_logger(__name__)

CSV_HEADERS = [
    "timestamp_fetch",
    "timestamp_event_slug",
    "price_to_beat",
    "current_price",
    "yes_price",
    "yes_size",
    "no_price",
    "no_size",
]


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


class AuditLogger:
    """Append-only CSV trail: fetch time, round start, target, spot, best asks.

    The header is written when the file does not exist yet. Write errors are
    logged and do not fail the poll.
    """

    def __init__(self, csv_path: str | Path) -> None:
        self._path = Path(csv_path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> None:
        try:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(self._path, "w", newline="", encoding="utf-8") as f:
                    csv.writer(f).writerow(CSV_HEADERS)
        except OSError as exc:
            logger.error("audit_csv_init_failed", path=str(self._path), error=str(exc))

    def record_poll(self, snapshot: MarketSnapshot, resolved_target: Decimal | None) -> None:
        yes_ask = snapshot.best_ask(Side.YES)
        no_ask = snapshot.best_ask(Side.NO)
        start = timestamp_from_slug(snapshot.window_id)
        row = [
            datetime.now(tz=UTC).isoformat(),
            _cell(start),
            _cell(resolved_target),
            _cell(snapshot.spot_price),
            _cell(yes_ask.price if yes_ask else None),
            _cell(yes_ask.size if yes_ask else None),
            _cell(no_ask.price if no_ask else None),
            _cell(no_ask.size if no_ask else None),
        ]
        try:
            with open(self._path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(row)
        except OSError as exc:
            logger.error("audit_csv_append_failed", path=str(self._path), error=str(exc))
