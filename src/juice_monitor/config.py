# src/juice_monitor/config.py
from dataclasses import dataclass, asdict
import logging
import os
from typing import Optional, Dict, Any, Mapping

from dotenv import load_dotenv

# .env is optional; real environment variables always win
load_dotenv(override=False)

INIT_MODES = ("genesis", "now")
MIN_POLL_INTERVAL_MS = 1000


class ConfigError(ValueError):
    """Raised when the environment does not describe a runnable monitor."""


@dataclass(frozen=True)
class Settings:
    # -------- Telegram ---------
    telegram_bot_token: str
    telegram_chat_id: str

    # -------- Feeds ------------
    juiceswap_graphql_url: str
    juicedollar_graphql_url: str
    citrea_explorer_url: str = "https://citreascan.com"

    # -------- Loop -------------
    poll_interval_ms: int = 30000
    watermark_path: str = ".watermarks.json"
    init_mode: str = "genesis"

    # -------- Logging ----------
    log_level: str = "INFO"

    @property
    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000

    # helper: convert to dict (useful for logging); never leaks the bot token
    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["telegram_bot_token"] = "***"
        return d

    def from_overrides(self, **kwargs) -> "Settings":
        """
        Return a copy with runtime overrides applied (e.g., parsed CLI flags).
        Only keys that match fields and are not None are applied.
        """
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if k in current and v is not None})
        current["poll_interval_ms"] = _validate_poll_interval(str(current["poll_interval_ms"]))
        current["init_mode"] = _validate_init_mode(current["init_mode"])
        current["log_level"] = _validate_log_level(current["log_level"])
        return Settings(**current)


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigError(f"Missing required environment variable: {name}")
    return value


def _optional(env: Mapping[str, str], name: str, default: str) -> str:
    return env.get(name) or default


def _validate_poll_interval(value: str) -> int:
    try:
        ms = int(value)
    except (TypeError, ValueError):
        ms = None
    if ms is None or ms < MIN_POLL_INTERVAL_MS:
        raise ConfigError(
            f'Invalid POLL_INTERVAL_MS: "{value}". Must be a number >= {MIN_POLL_INTERVAL_MS}.'
        )
    return ms


def _validate_init_mode(value: str) -> str:
    if value not in INIT_MODES:
        raise ConfigError(f'Invalid INIT_MODE: "{value}". Must be "now" or "genesis".')
    return value


def _validate_log_level(value: str) -> str:
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f'Invalid LOG_LEVEL: "{value}".')
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the process environment (or an explicit mapping)."""
    env = os.environ if environ is None else environ
    return Settings(
        telegram_bot_token=_require(env, "TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=_require(env, "TELEGRAM_CHAT_ID"),
        juiceswap_graphql_url=_require(env, "JUICESWAP_GRAPHQL_URL"),
        juicedollar_graphql_url=_require(env, "JUICEDOLLAR_GRAPHQL_URL"),
        citrea_explorer_url=_optional(env, "CITREA_EXPLORER_URL", "https://citreascan.com").rstrip("/"),
        poll_interval_ms=_validate_poll_interval(_optional(env, "POLL_INTERVAL_MS", "30000")),
        watermark_path=_optional(env, "WATERMARK_PATH", ".watermarks.json"),
        init_mode=_validate_init_mode(_optional(env, "INIT_MODE", "genesis")),
        log_level=_validate_log_level(_optional(env, "LOG_LEVEL", "INFO")),
    )
