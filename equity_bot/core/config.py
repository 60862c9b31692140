"""
Runtime settings for the position engine: which risk profile new trades
default to, whether hard exits may auto-sell, how the monitor polls, and
where positions live. Read from config.yaml, then overridden by the
environment (.env is loaded first). Telegram credentials belong in .env.

Risk-profile tables are constants in risk.profiles; only the default
profile name is a setting.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import yaml
from dotenv import load_dotenv

T = TypeVar("T")

_TRUE_WORDS = ("true", "1", "yes", "on")


def _project_root(project_root: Optional[Path]) -> Path:
    return project_root or Path(__file__).resolve().parents[2]


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Export .env next to config.yaml, without overriding variables already set."""
    path = _project_root(project_root) / ".env"
    if path.exists():
        load_dotenv(path)


def _as_bool(raw: Any) -> bool:
    return str(raw).strip().lower() in _TRUE_WORDS


def _setting(env_key: str, file_value: Any, default: T, cast: Callable[[Any], T]) -> T:
    """Env var wins over the file; an unparsable value of either falls back to default."""
    raw = os.getenv(env_key)
    for candidate in (raw, file_value):
        if candidate is None or (isinstance(candidate, str) and not candidate.strip()):
            continue
        try:
            return cast(candidate.strip() if isinstance(candidate, str) else candidate)
        except (TypeError, ValueError):
            return default
    return default


def _section(data: dict, name: str) -> dict:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Settings for the CLI and the monitor loop. Missing files mean defaults."""
    load_dotenv_if_exists(project_root)
    path = config_path or _project_root(project_root) / "config.yaml"
    data: dict = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    trading = _section(data, "trading")
    monitor = _section(data, "monitor")
    market_data = _section(data, "market_data")
    telegram = _section(data, "telegram")
    logging_cfg = _section(data, "logging")

    return Config(
        default_risk_profile=_setting(
            "DEFAULT_RISK_PROFILE", trading.get("default_risk_profile"), "Moderate", str),
        auto_trade_enabled=_setting("AUTO_TRADE_ENABLED", trading.get("auto_trade_enabled"), False, _as_bool),
        fetch_timeout_seconds=_setting(
            "FETCH_TIMEOUT_SECONDS", monitor.get("fetch_timeout_seconds"), 10.0, float),
        snapshot_days=_setting("SNAPSHOT_DAYS", monitor.get("snapshot_days"), 2, int),
        history_days=_setting("HISTORY_DAYS", monitor.get("history_days"), 60, int),
        interval_seconds=_setting("MONITOR_INTERVAL_SECONDS", monitor.get("interval_seconds"), 1800, int),
        positions_file=_setting("POSITIONS_FILE", monitor.get("positions_file"), Path("positions.yaml"), Path),
        market_data_timeout_seconds=_setting(
            "MARKET_DATA_TIMEOUT_SECONDS", market_data.get("timeout_seconds"), 10.0, float),
        telegram_bot_token=_setting("TELEGRAM_BOT_TOKEN", telegram.get("bot_token"), "", str),
        telegram_chat_id=_setting("TELEGRAM_CHAT_ID", telegram.get("chat_id"), "", str),
        log_level=str(logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=str(logging_cfg.get("log_file", "equity_bot.log")),
    )


class Config:
    """Loaded settings. Treat as read-only."""

    __slots__ = (
        "default_risk_profile", "auto_trade_enabled",
        "fetch_timeout_seconds", "snapshot_days", "history_days", "interval_seconds", "positions_file",
        "market_data_timeout_seconds",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        default_risk_profile: str = "Moderate",
        auto_trade_enabled: bool = False,
        fetch_timeout_seconds: float = 10.0,
        snapshot_days: int = 2,
        history_days: int = 60,
        interval_seconds: int = 1800,
        positions_file: Path = None,
        market_data_timeout_seconds: float = 10.0,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "equity_bot.log",
    ):
        self.default_risk_profile = default_risk_profile
        self.auto_trade_enabled = auto_trade_enabled
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.snapshot_days = snapshot_days
        self.history_days = history_days
        self.interval_seconds = interval_seconds
        self.positions_file = Path(positions_file) if positions_file else Path("positions.yaml")
        self.market_data_timeout_seconds = market_data_timeout_seconds
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
