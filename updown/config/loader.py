"""TOML config loader with environment variable overrides."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Raised when config loading or validation fails."""


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, returning a new dict."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], prefix: str = "UPDOWN") -> dict[str, Any]:
    """Apply environment variable overrides.

    Env var naming: UPDOWN__section__key=value (double underscore separator).
    Nested keys: UPDOWN__paper__initial_balance=500
    """
    result = _deep_merge({}, config)
    env_prefix = f"{prefix}__"

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        parts = env_key[len(env_prefix) :].lower().split("__")
        target = result
        for part in parts[:-1]:
            if part not in target:
                target[part] = {}
            if isinstance(target[part], dict):
                target = target[part]
            else:
                break
        else:
            final_key = parts[-1]
            target[final_key] = _coerce_value(env_value)

    return result


def _coerce_value(value: str) -> Any:
    """Coerce string env var value to appropriate Python type.

    Numbers are tried before booleans so "0"/"1" stay numeric.
    """
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    return value


class ConfigLoader:
    """Load and merge TOML config files with env var overrides."""

    def __init__(
        self,
        config_dir: str | Path = "config",
        env: str | None = None,
    ) -> None:
        self._config_dir = Path(config_dir)
        self._env = env or os.environ.get("UPDOWN_ENV", "development")
        self._config: dict[str, Any] = {}

    @property
    def env(self) -> str:
        return self._env

    def load(self) -> dict[str, Any]:
        """Load config: default.toml → {env}.toml → env vars."""
        default_path = self._config_dir / "default.toml"
        if not default_path.exists():
            msg = f"Default config not found: {default_path}"
            raise ConfigError(msg)

        self._config = self._load_toml(default_path)

        env_path = self._config_dir / f"{self._env}.toml"
        if env_path.exists():
            env_config = self._load_toml(env_path)
            self._config = _deep_merge(self._config, env_config)

        self._config = _apply_env_overrides(self._config)
        return self._config

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a config value using dotted notation: 'paper.initial_balance'."""
        if not self._config:
            self.load()

        parts = dotted_key.split(".")
        current: Any = self._config
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def set(self, dotted_key: str, value: Any) -> None:
        """Set a value in the loaded config (used for CLI overrides)."""
        if not self._config:
            self.load()

        parts = dotted_key.split(".")
        target = self._config
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    def require(self, dotted_key: str) -> Any:
        """Get a config value, raising ConfigError if missing."""
        value = self.get(dotted_key)
        if value is None:
            msg = f"Required config key missing: {dotted_key}"
            raise ConfigError(msg)
        return value

    def validate_keys(self, required_keys: list[str]) -> None:
        """Validate that all required keys exist."""
        missing = [k for k in required_keys if self.get(k) is None]
        if missing:
            msg = f"Missing required config keys: {', '.join(missing)}"
            raise ConfigError(msg)

    def validate_ranges(self) -> None:
        """Validate value ranges for the parameters the poll loop depends on.

        Raises:
            ConfigError: If any parameter is out of its valid range.
        """
        if not self._config:
            self.load()

        errors: list[str] = []

        balance = self.get("paper.initial_balance")
        if balance is not None and balance < 0:
            errors.append(f"paper.initial_balance must be >= 0, got {balance}")

        poll = self.get("bot.poll_interval_seconds")
        if poll is not None and poll < 2:
            errors.append(f"bot.poll_interval_seconds must be >= 2, got {poll}")

        fetch_timeout = self.get("bot.fetch_timeout_seconds")
        if fetch_timeout is not None and fetch_timeout <= 0:
            errors.append(f"bot.fetch_timeout_seconds must be > 0, got {fetch_timeout}")

        period = self.get("window.period_seconds")
        if period is not None and period <= 0:
            errors.append(f"window.period_seconds must be > 0, got {period}")

        terminal = self.get("window.terminal_seconds")
        if terminal is not None and not (0 < terminal <= (period or 300)):
            errors.append(
                f"window.terminal_seconds must be in (0, period_seconds], got {terminal}"
            )

        threshold = self.get("strategy.high_confidence.threshold")
        if threshold is not None and not (0 < threshold <= 1):
            errors.append(f"strategy.high_confidence.threshold must be in (0, 1], got {threshold}")

        allocation = self.get("strategy.high_confidence.allocation")
        if allocation is not None and not (0 < allocation <= 1):
            errors.append(
                f"strategy.high_confidence.allocation must be in (0, 1], got {allocation}"
            )

        if errors:
            msg = "Config validation failed:\n  " + "\n  ".join(errors)
            raise ConfigError(msg)

    @property
    def config(self) -> dict[str, Any]:
        if not self._config:
            self.load()
        return self._config

    @staticmethod
    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return tomllib.load(f)
