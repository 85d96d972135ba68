"""BTC 5-minute up/down window watcher."""
