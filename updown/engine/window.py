"""Window identity: which 5-minute round is current, and when it started."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field

from updown.core.logging import get_logger

log = get_logger(__name__)

DEFAULT_PERIOD_SECONDS = 300
DEFAULT_TERMINAL_SECONDS = 60
DEFAULT_SLUG_PREFIX = "btc-updown-5m"

_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class WindowId:
    """Identity of one round.

    Two ids are equal iff their slugs are equal. ``start_ts`` is None for a
    pinned override whose slug carries no start timestamp.
    """

    slug: str
    start_ts: int | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.slug


def timestamp_from_slug(slug: str) -> int | None:
    """Extract the Unix start time from a slug like ``btc-updown-5m-1771814100``."""
    part = str(slug).split("-")[-1]
    if not _DIGITS.match(part):
        return None
    return int(part)


class WindowClock:
    """Derives the current round from wall-clock time or a pinned override.

    The override (``event_slug`` verbatim, or ``event_id`` which becomes
    ``<prefix>-<id>`` when all digits) stays authoritative for the life of
    the clock.
    """

    def __init__(
        self,
        period_seconds: int = DEFAULT_PERIOD_SECONDS,
        terminal_seconds: int = DEFAULT_TERMINAL_SECONDS,
        slug_prefix: str = DEFAULT_SLUG_PREFIX,
        event_slug: str | None = None,
        event_id: str | None = None,
    ) -> None:
        self._period = int(period_seconds)
        self._terminal = int(terminal_seconds)
        self._prefix = slug_prefix
        self._override = self._resolve_override(event_slug, event_id)
        if self._override is not None:
            log.info(
                "window_override",
                slug=self._override.slug,
                start_ts=self._override.start_ts,
            )
            if self._override.start_ts is None:
                log.warning("window_override_without_start", slug=self._override.slug)

    @property
    def period_seconds(self) -> int:
        return self._period

    @property
    def terminal_seconds(self) -> int:
        return self._terminal

    def _resolve_override(self, event_slug: str | None, event_id: str | None) -> WindowId | None:
        if event_slug:
            return self.from_slug(str(event_slug))
        if event_id:
            raw = str(event_id).strip()
            if _DIGITS.match(raw):
                return self.from_slug(f"{self._prefix}-{raw}")
            return self.from_slug(raw)
        return None

    @staticmethod
    def from_slug(slug: str) -> WindowId:
        return WindowId(slug=slug, start_ts=timestamp_from_slug(slug))

    def window_start_for(self, now: float) -> int:
        """Start of the period-aligned round containing ``now``."""
        return int(now // self._period) * self._period

    def current_window_id(self, now: float | None = None) -> WindowId:
        if self._override is not None:
            return self._override
        if now is None:
            now = time.time()
        start = self.window_start_for(now)
        return WindowId(slug=f"{self._prefix}-{start}", start_ts=start)

    @staticmethod
    def window_start_time(window_id: WindowId) -> int | None:
        return window_id.start_ts

    def seconds_into_window(self, window_id: WindowId, now: float | None = None) -> int | None:
        start = self.window_start_time(window_id)
        if start is None:
            return None
        if now is None:
            now = time.time()
        return int(now) - start

    def within_terminal_window(self, window_id: WindowId, now: float | None = None) -> bool:
        """True in the trailing ``terminal_seconds`` of the round.

        Always False when the round's start time is unknown.
        """
        elapsed = self.seconds_into_window(window_id, now)
        if elapsed is None:
            return False
        return self._period - self._terminal <= elapsed < self._period
