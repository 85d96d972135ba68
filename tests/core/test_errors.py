"""Tests for poll-boundary exception types."""

from __future__ import annotations

from updown.core.errors import FetchFailure, MalformedSnapshot


class TestFetchFailure:
    def test_carries_context(self) -> None:
        exc = FetchFailure("boom", window_id="btc-updown-5m-1", operation="get_event")
        assert str(exc) == "boom"
        assert exc.window_id == "btc-updown-5m-1"
        assert exc.operation == "get_event"

    def test_malformed_is_fetch_failure(self) -> None:
        exc = MalformedSnapshot("no markets")
        assert isinstance(exc, FetchFailure)
        assert exc.window_id == ""
