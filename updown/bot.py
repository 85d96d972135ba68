"""Bot orchestrator: wires the feed, lifecycle controller and ledger together.

One asyncio task runs the loop: fetch a snapshot for the current round, hand
it to the lifecycle controller, report, then wait out the poll interval. The
wait is the only suspension point between polls and is cut short by the
shutdown event.
"""

from __future__ import annotations

import asyncio
import signal
import time
from decimal import Decimal
from typing import TYPE_CHECKING

from updown.config.loader import ConfigLoader
from updown.core.errors import FetchFailure
from updown.core.logging import get_logger
from updown.data.binance_ticker import BinanceTicker
from updown.data.market_feed import MarketFeed
from updown.data.polymarket_client import PolymarketClient
from updown.engine.lifecycle import LifecycleController, PollOutcome
from updown.engine.window import WindowClock
from updown.execution.audit import AuditLogger
from updown.execution.live_router import LiveOrderRouter
from updown.execution.paper_ledger import PaperLedger
from updown.models.market import Side
from updown.strategies import registry

if TYPE_CHECKING:
    from updown.interfaces import PollAudit, SnapshotFeed
    from updown.models.market import MarketSnapshot, OrderBookSnapshot
    from updown.strategies.base import BaseStrategy

logger = get_logger(__name__)


def _load_strategies() -> None:
    """Import strategy modules so their @register decorators run."""
    import updown.strategies.high_confidence  # noqa: F401


def _format_book(book: OrderBookSnapshot | None) -> str:
    if book is None:
        return "book unavailable (e.g. market closed)"
    bid = book.best_bid
    ask = book.best_ask
    bid_str = f"{bid.price} @ {bid.size}" if bid else "-"
    ask_str = f"{ask.price} @ {ask.size}" if ask else "-"
    return f"bid: {bid_str}  ask: {ask_str}"


class BotOrchestrator:
    """Main poll loop: snapshot -> lifecycle -> ledger/router -> audit."""

    def __init__(
        self,
        mode: str,
        strategy_name: str,
        config: ConfigLoader,
        feed: SnapshotFeed | None = None,
        audit: PollAudit | None = None,
        clock: WindowClock | None = None,
        strategy: BaseStrategy | None = None,
    ) -> None:
        if mode not in ("paper", "live"):
            msg = f"mode must be 'paper' or 'live', got {mode!r}"
            raise ValueError(msg)
        self._mode = mode
        self._strategy_name = strategy_name
        self._config = config
        self._running = False
        self._poll_interval = max(2.0, float(config.get("bot.poll_interval_seconds", 10)))
        self._shutdown_event = asyncio.Event()
        self._installed_signals: list[signal.Signals] = []

        self._clock = clock or WindowClock(
            period_seconds=int(config.get("window.period_seconds", 300)),
            terminal_seconds=int(config.get("window.terminal_seconds", 60)),
            slug_prefix=str(config.get("window.slug_prefix", "btc-updown-5m")),
            event_slug=config.get("window.event_slug"),
            event_id=config.get("window.event_id"),
        )
        self._feed = feed or self._build_feed(config)
        self._audit = audit if audit is not None else self._build_audit(config)

        if strategy is None:
            _load_strategies()
            strategy = registry.create(strategy_name, config)
        self._strategy = strategy

        if mode == "paper":
            initial = Decimal(str(config.get("paper.initial_balance", 1000)))
            self._ledger: PaperLedger | None = PaperLedger(initial_balance=initial)
            self._controller = LifecycleController(self._clock, strategy, ledger=self._ledger)
        else:
            self._ledger = None
            self._controller = LifecycleController(
                self._clock, strategy, router=LiveOrderRouter(),
            )

    @staticmethod
    def _build_feed(config: ConfigLoader) -> MarketFeed:
        request_timeout = float(config.get("polymarket.request_timeout_seconds", 5))
        polymarket = PolymarketClient(
            gamma_url=str(config.get("polymarket.gamma_url", "https://gamma-api.polymarket.com")),
            clob_url=str(config.get("polymarket.clob_url", "https://clob.polymarket.com")),
            timeout=request_timeout,
        )
        ticker = BinanceTicker(
            ticker_url=str(
                config.get("binance.ticker_url", "https://api.binance.com/api/v3/ticker/price")
            ),
            symbol=str(config.get("binance.symbol", "BTCUSDT")),
            timeout=request_timeout,
        )
        return MarketFeed(
            polymarket=polymarket,
            ticker=ticker,
            timeout=float(config.get("bot.fetch_timeout_seconds", 8)),
        )

    @staticmethod
    def _build_audit(config: ConfigLoader) -> AuditLogger | None:
        path = config.get("audit.csv_path", "")
        return AuditLogger(path) if path else None

    @property
    def controller(self) -> LifecycleController:
        return self._controller

    @property
    def ledger(self) -> PaperLedger | None:
        return self._ledger

    async def start(self) -> int:
        """Install signal handlers and run the poll loop until shutdown."""
        logger.info(
            "bot_start",
            mode=self._mode,
            strategy=self._strategy_name,
            poll_interval=self._poll_interval,
            balance=str(self._ledger.balance) if self._ledger else None,
            audit_csv=str(self._audit.path) if isinstance(self._audit, AuditLogger) else None,
        )
        self._running = True

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._request_shutdown, sig)
                self._installed_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug("signal_handler_unavailable", signal=sig.name)

        try:
            await self._main_loop()
        except asyncio.CancelledError:
            logger.info("bot_cancelled")
        finally:
            await self._cleanup()

        return 0

    def _request_shutdown(self, sig: signal.Signals | None = None) -> None:
        """Stop the loop; interrupts the inter-poll wait."""
        logger.info("shutdown_requested", signal=sig.name if sig else None)
        self._running = False
        self._shutdown_event.set()

    async def _main_loop(self) -> None:
        while self._running:
            await self.poll_once()

            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=self._poll_interval,
                )
                break
            except TimeoutError:
                continue

    async def poll_once(self, now: float | None = None) -> PollOutcome | None:
        """Run a single poll. Failures are logged and never propagate."""
        window_id = self._controller.current_window_id(now)
        try:
            snapshot = await self._feed.fetch_snapshot(window_id)
        except FetchFailure as exc:
            logger.warning(
                "poll_fetch_failed",
                window_id=exc.window_id or window_id.slug,
                operation=exc.operation,
                error=str(exc),
            )
            return None
        except Exception:
            logger.exception("poll_error", window_id=window_id.slug, operation="fetch_snapshot")
            return None

        try:
            outcome = self._controller.process_poll(
                window_id, snapshot, now if now is not None else time.time(),
            )
        except Exception:
            logger.exception("poll_error", window_id=window_id.slug, operation="process_poll")
            return None

        self._report(snapshot, outcome)
        if self._audit is not None:
            self._audit.record_poll(snapshot, outcome.effective_target)
        return outcome

    def _report(self, snapshot: MarketSnapshot, outcome: PollOutcome) -> None:
        logger.info(
            "poll_snapshot",
            title=snapshot.window_title,
            window_id=snapshot.window_id,
            spot=f"{snapshot.spot_price:,.2f}" if snapshot.spot_price is not None else None,
            target=(
                f"{outcome.effective_target:,.2f}"
                if outcome.effective_target is not None
                else None
            ),
            yes=_format_book(snapshot.book(Side.YES)),
            no=_format_book(snapshot.book(Side.NO)),
            terminal_window=outcome.within_terminal_window,
        )

        if outcome.gated:
            logger.info("no_action", window_id=outcome.window_id.slug, reason="already_acted")
        elif outcome.acted:
            first = outcome.orders[0]
            logger.info(
                "position_taken",
                window_id=outcome.window_id.slug,
                side=first.side.value,
                size=f"{first.size:.2f}",
                price=str(first.price),
                value=f"{first.notional:.2f}",
                filled=sum(1 for f in outcome.fills if f.filled),
                orders=len(outcome.orders),
                balance=f"{self._ledger.balance:.2f}" if self._ledger else None,
            )
        else:
            logger.info("no_action", window_id=outcome.window_id.slug)

    async def _cleanup(self) -> None:
        logger.info(
            "bot_shutdown",
            mode=self._mode,
            balance=str(self._ledger.balance) if self._ledger else None,
        )
        self._running = False
        loop = asyncio.get_running_loop()
        for sig in self._installed_signals:
            loop.remove_signal_handler(sig)
        self._installed_signals.clear()
        await self._feed.close()


def run_bot(
    mode: str,
    strategy: str | None = None,
    config_dir: str = "config",
    env: str | None = None,
    event_slug: str | None = None,
    event_id: str | None = None,
) -> int:
    """Run the watcher.

    Args:
        mode: "paper" or "live".
        strategy: Strategy name; defaults to ``bot.strategy`` from config.
        config_dir: Path to config directory.
        env: Environment name.
        event_slug: Pin a specific event slug instead of following the clock.
        event_id: Pin a specific event id (digits become a 5m slug).

    Returns:
        Exit code (0 = success).
    """
    config = ConfigLoader(config_dir=config_dir, env=env)
    config.load()
    config.validate_ranges()
    if event_slug:
        config.set("window.event_slug", event_slug)
    if event_id:
        config.set("window.event_id", event_id)

    strategy_name = strategy or str(config.get("bot.strategy", "high_confidence"))
    orchestrator = BotOrchestrator(mode=mode, strategy_name=strategy_name, config=config)
    return asyncio.run(orchestrator.start())
