"""Tests for the high-confidence late-entry strategy."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path  # noqa: TCH003

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from updown.config.loader import ConfigLoader
from updown.execution.paper_ledger import PaperLedger
from updown.models.market import MarketSnapshot, Side
from updown.models.order import FillStatus, OrderAction
from updown.strategies.base import StrategyContext
from updown.strategies.high_confidence import HighConfidenceStrategy

SnapshotFactory = Callable[..., MarketSnapshot]

IN_WINDOW = StrategyContext(balance=Decimal("1000"), within_terminal_window=True)


@pytest.fixture
def strategy(config_loader: ConfigLoader) -> HighConfidenceStrategy:
    return HighConfidenceStrategy(config_loader)


class TestConfig:
    def test_reads_config(self, strategy: HighConfidenceStrategy) -> None:
        assert strategy.threshold == Decimal("0.95")
        assert strategy.allocation == Decimal("0.2")

    def test_defaults_when_unset(self, tmp_path: Path) -> None:
        (tmp_path / "default.toml").write_text("[bot]\npoll_interval_seconds = 10\n")
        loader = ConfigLoader(config_dir=tmp_path)
        loader.load()
        strat = HighConfidenceStrategy(loader)
        assert strat.threshold == Decimal("0.95")
        assert strat.allocation == Decimal("0.20")


class TestDecide:
    def test_buys_yes_above_threshold(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.96", no_ask="0.40"), IN_WINDOW)
        assert len(orders) == 1
        assert orders[0].side is Side.YES
        assert orders[0].action is OrderAction.BUY
        assert orders[0].price == Decimal("0.96")
        assert orders[0].size == Decimal("208.33")

    def test_buys_no_above_threshold(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.05", no_ask="0.97"), IN_WINDOW)
        assert [o.side for o in orders] == [Side.NO]
        assert orders[0].size == Decimal("206.18")

    def test_exact_threshold_qualifies(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.10", no_ask="0.95"), IN_WINDOW)
        assert [o.side for o in orders] == [Side.NO]

    def test_higher_side_wins_when_both_clear(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.96", no_ask="0.98"), IN_WINDOW)
        assert [o.side for o in orders] == [Side.NO]

    def test_tie_favors_yes(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.95", no_ask="0.95"), IN_WINDOW)
        assert [o.side for o in orders] == [Side.YES]

    def test_below_threshold_no_orders(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        assert strategy.decide(make_snapshot(yes_ask="0.94", no_ask="0.60"), IN_WINDOW) == []

    def test_outside_terminal_window(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        ctx = StrategyContext(balance=Decimal("1000"), within_terminal_window=False)
        assert strategy.decide(make_snapshot(yes_ask="0.99"), ctx) == []

    def test_zero_balance(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        ctx = StrategyContext(balance=Decimal("0"), within_terminal_window=True)
        assert strategy.decide(make_snapshot(yes_ask="0.99"), ctx) == []

    def test_missing_book_returns_nothing(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        snap = make_snapshot(yes_ask="0.99", missing=Side.NO)
        assert strategy.decide(snap, IN_WINDOW) == []

    def test_empty_asks_returns_nothing(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        snap = make_snapshot(yes_ask=None, no_ask="0.99")
        assert strategy.decide(snap, IN_WINDOW) == []

    def test_pure(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        snap = make_snapshot(yes_ask="0.96", no_ask="0.40")
        assert strategy.decide(snap, IN_WINDOW) == strategy.decide(snap, IN_WINDOW)


@pytest.fixture
def all_in(config_loader: ConfigLoader) -> HighConfidenceStrategy:
    config_loader.set("strategy.high_confidence.allocation", 1.0)
    return HighConfidenceStrategy(config_loader)


class TestSizing:
    def test_size_rounds_down_to_step(
        self, strategy: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        orders = strategy.decide(make_snapshot(yes_ask="0.99", no_ask="0.01"), IN_WINDOW)
        assert orders[0].size == Decimal("202.02")

    def test_full_allocation_fills_on_ledger(
        self, all_in: HighConfidenceStrategy, make_snapshot: SnapshotFactory,
    ) -> None:
        balance = Decimal("999.99")
        ctx = StrategyContext(balance=balance, within_terminal_window=True)
        orders = all_in.decide(make_snapshot(yes_ask="0.95", no_ask="0.05"), ctx)

        assert len(orders) == 1
        assert orders[0].notional <= balance
        fill = PaperLedger(initial_balance=balance).apply(orders[0])
        assert fill.status is FillStatus.FILLED

    @settings(max_examples=100, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        balance=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2),
        ask=st.decimals(min_value=Decimal("0.95"), max_value=Decimal("0.999"), places=3),
    )
    def test_order_never_costs_more_than_balance(
        self,
        all_in: HighConfidenceStrategy,
        make_snapshot: SnapshotFactory,
        balance: Decimal,
        ask: Decimal,
    ) -> None:
        ctx = StrategyContext(balance=balance, within_terminal_window=True)
        orders = all_in.decide(make_snapshot(yes_ask=str(ask), no_ask="0.01"), ctx)
        for order in orders:
            assert order.price * order.size <= balance
            assert PaperLedger(initial_balance=balance).apply(order).filled
