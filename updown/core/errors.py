"""Exception types raised at the poll boundary."""

from __future__ import annotations


class FetchFailure(Exception):
    """A remote read failed: network error, HTTP error, timeout or bad payload.

    The poll that hit it is abandoned without touching any round or ledger
    state; the next scheduled poll retries from scratch.
    """

    def __init__(self, message: str, *, window_id: str = "", operation: str = "") -> None:
        super().__init__(message)
        self.window_id = window_id
        self.operation = operation


class MalformedSnapshot(FetchFailure):
    """The payload arrived but lacks identifiers the snapshot needs."""
