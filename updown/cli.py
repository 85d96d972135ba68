"""updown CLI entry point."""

from __future__ import annotations

import argparse
import os
import sys

from updown.config.loader import ConfigError


def _confirm_live_trading(env: str | None) -> bool:
    """Require explicit confirmation before running the live path."""
    print("=" * 60)
    print("  WARNING: You are about to start LIVE mode.")
    print("  Orders are routed to the live path instead of the paper ledger.")
    print("=" * 60)
    print(f"  Environment: {env or 'production'}")
    print("=" * 60)
    response = input('Type "yes" to confirm live mode: ')
    return response.strip().lower() == "yes"


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="updown",
        description="BTC 5-minute up/down window watcher for Polymarket",
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--paper", action="store_true", help="Simulate fills on a paper ledger")
    mode.add_argument("--live", action="store_true", help="Route orders to the live path")

    parser.add_argument(
        "--strategy",
        type=str,
        default=None,
        help="Strategy name (default: bot.strategy from config, high_confidence)",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default="config",
        help="Config directory path (default: config)",
    )
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help="Environment name (default: from UPDOWN_ENV)",
    )
    pin = parser.add_mutually_exclusive_group()
    pin.add_argument(
        "--event-slug",
        type=str,
        default=None,
        help="Pin an event slug (e.g. btc-updown-5m-1771814100) instead of the clock",
    )
    pin.add_argument(
        "--event-id",
        type=str,
        default=None,
        help="Pin an event id; digits are expanded to btc-updown-5m-<id>",
    )
    parser.add_argument(
        "--auto-confirm",
        action="store_true",
        default=False,
        help=(
            "Skip interactive live confirmation "
            "(requires UPDOWN_LIVE_AUTO_CONFIRM=true env var)."
        ),
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.live and args.env is None:
        args.env = "production"

    if args.live:
        auto_confirmed = (
            args.auto_confirm
            and os.environ.get("UPDOWN_LIVE_AUTO_CONFIRM", "").lower() == "true"
        )
        if not auto_confirmed and not _confirm_live_trading(args.env):
            print("Live mode cancelled.")
            return 1

    mode = "live" if args.live else "paper"
    print(f"Starting {mode.upper()} watcher (strategy: {args.strategy or 'from config'}). Ctrl+C to stop.")

    from updown.bot import run_bot

    try:
        return run_bot(
            mode=mode,
            strategy=args.strategy,
            config_dir=args.config_dir,
            env=args.env,
            event_slug=args.event_slug,
            event_id=args.event_id,
        )
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    except KeyError as exc:
        print(f"Strategy error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
