"""Tests for window identity and the terminal activation window."""

from __future__ import annotations

import pytest

from updown.engine.window import WindowClock, WindowId, timestamp_from_slug

ROUND_START = 1771814100


class TestTimestampFromSlug:
    def test_trailing_digits(self) -> None:
        assert timestamp_from_slug("btc-updown-5m-1771814100") == 1771814100

    def test_no_digits(self) -> None:
        assert timestamp_from_slug("bitcoin-up-or-down-custom") is None

    def test_mixed_suffix(self) -> None:
        assert timestamp_from_slug("btc-updown-5m-17718x") is None


class TestWindowId:
    def test_equality_by_slug_only(self) -> None:
        assert WindowId("a-1", start_ts=1) == WindowId("a-1", start_ts=None)
        assert WindowId("a-1") != WindowId("a-2")

    def test_hashable(self) -> None:
        records = {WindowId("a-1", 1): "x"}
        assert records[WindowId("a-1")] == "x"

    def test_str_is_slug(self) -> None:
        assert str(WindowId("btc-updown-5m-1")) == "btc-updown-5m-1"


class TestCurrentWindowId:
    def test_aligned_to_period(self) -> None:
        clock = WindowClock()
        wid = clock.current_window_id(ROUND_START + 123.7)
        assert wid.slug == f"btc-updown-5m-{ROUND_START}"
        assert wid.start_ts == ROUND_START

    def test_boundary_starts_new_round(self) -> None:
        clock = WindowClock()
        assert clock.current_window_id(ROUND_START + 299.999).start_ts == ROUND_START
        assert clock.current_window_id(ROUND_START + 300).start_ts == ROUND_START + 300

    def test_rounds_are_contiguous(self) -> None:
        clock = WindowClock()
        starts = {clock.current_window_id(ROUND_START + s).start_ts for s in range(0, 900, 7)}
        assert starts == {ROUND_START, ROUND_START + 300, ROUND_START + 600}

    def test_custom_prefix_and_period(self) -> None:
        clock = WindowClock(period_seconds=900, slug_prefix="btc-updown-15m")
        wid = clock.current_window_id(ROUND_START + 10)
        assert wid.start_ts is not None
        assert wid.start_ts % 900 == 0
        assert wid.slug.startswith("btc-updown-15m-")

    def test_slug_override_is_verbatim(self) -> None:
        clock = WindowClock(event_slug="btc-updown-5m-1771814100")
        wid = clock.current_window_id(ROUND_START + 5000)
        assert wid.slug == "btc-updown-5m-1771814100"
        assert wid.start_ts == ROUND_START

    def test_numeric_event_id_expands_to_slug(self) -> None:
        clock = WindowClock(event_id=" 1771814100 ")
        assert clock.current_window_id().slug == "btc-updown-5m-1771814100"

    def test_non_numeric_event_id_taken_verbatim(self) -> None:
        clock = WindowClock(event_id="some-custom-event")
        wid = clock.current_window_id()
        assert wid.slug == "some-custom-event"
        assert wid.start_ts is None

    def test_slug_wins_over_event_id(self) -> None:
        clock = WindowClock(event_slug="pinned-slug", event_id="123")
        assert clock.current_window_id().slug == "pinned-slug"


class TestTerminalWindow:
    @pytest.mark.parametrize(
        ("elapsed", "expected"),
        [(0, False), (239, False), (240, True), (270, True), (299, True), (300, False)],
    )
    def test_last_minute(self, elapsed: int, expected: bool) -> None:
        clock = WindowClock()
        wid = WindowId(f"btc-updown-5m-{ROUND_START}", ROUND_START)
        assert clock.within_terminal_window(wid, ROUND_START + elapsed) is expected

    def test_seconds_into_window(self) -> None:
        clock = WindowClock()
        wid = clock.current_window_id(ROUND_START + 42.9)
        assert clock.seconds_into_window(wid, ROUND_START + 42.9) == 42

    def test_unknown_start_disables_gating(self) -> None:
        clock = WindowClock(event_slug="malformed-override")
        wid = clock.current_window_id()
        assert clock.window_start_time(wid) is None
        assert clock.seconds_into_window(wid, ROUND_START) is None
        assert clock.within_terminal_window(wid, ROUND_START + 250) is False

    def test_custom_terminal_length(self) -> None:
        clock = WindowClock(terminal_seconds=120)
        wid = WindowId(f"btc-updown-5m-{ROUND_START}", ROUND_START)
        assert clock.within_terminal_window(wid, ROUND_START + 180) is True
        assert clock.within_terminal_window(wid, ROUND_START + 179) is False
