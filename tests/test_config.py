"""Tests for core.config, core.logger and utils.telegram."""

import logging
from pathlib import Path

import pytest
import requests

from equity_bot.core.config import load_config
from equity_bot.core.logger import setup_logging
from equity_bot.utils import telegram

ENV_KEYS = (
    "DEFAULT_RISK_PROFILE", "AUTO_TRADE_ENABLED", "FETCH_TIMEOUT_SECONDS", "SNAPSHOT_DAYS",
    "HISTORY_DAYS", "MONITOR_INTERVAL_SECONDS", "POSITIONS_FILE",
    "MARKET_DATA_TIMEOUT_SECONDS", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so values loaded from .env are undone after each test
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_defaults_without_files(tmp_path):
    cfg = load_config(project_root=tmp_path)
    assert cfg.default_risk_profile == "Moderate"
    assert cfg.auto_trade_enabled is False
    assert cfg.fetch_timeout_seconds == 10.0
    assert cfg.snapshot_days == 2
    assert cfg.positions_file == Path("positions.yaml")


def test_yaml_values(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "trading:\n"
        "  default_risk_profile: Aggressive\n"
        "  auto_trade_enabled: true\n"
        "monitor:\n"
        "  fetch_timeout_seconds: 3.5\n"
        "  interval_seconds: 600\n"
        "telegram:\n"
        "  chat_id: 12345\n",
        encoding="utf-8",
    )
    cfg = load_config(project_root=tmp_path)
    assert cfg.default_risk_profile == "Aggressive"
    assert cfg.auto_trade_enabled is True
    assert cfg.fetch_timeout_seconds == 3.5
    assert cfg.interval_seconds == 600
    assert cfg.telegram_chat_id == "12345"


def test_env_overrides_yaml(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("trading:\n  default_risk_profile: Aggressive\n", encoding="utf-8")
    monkeypatch.setenv("DEFAULT_RISK_PROFILE", "Conservative")
    monkeypatch.setenv("SNAPSHOT_DAYS", "5")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "not-a-number")
    cfg = load_config(project_root=tmp_path)
    assert cfg.default_risk_profile == "Conservative"
    assert cfg.snapshot_days == 5
    assert cfg.fetch_timeout_seconds == 10.0


def test_env_flag_enables_auto_trade(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("trading:\n  auto_trade_enabled: false\n", encoding="utf-8")
    monkeypatch.setenv("AUTO_TRADE_ENABLED", "yes")
    monkeypatch.setenv("POSITIONS_FILE", "data/open.yaml")
    cfg = load_config(project_root=tmp_path)
    assert cfg.auto_trade_enabled is True
    assert cfg.positions_file == Path("data/open.yaml")


def test_malformed_section_uses_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text("monitor: every-hour\n", encoding="utf-8")
    cfg = load_config(project_root=tmp_path)
    assert cfg.interval_seconds == 1800


def test_dotenv_is_loaded(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("TELEGRAM_BOT_TOKEN=abc123\n", encoding="utf-8")
    cfg = load_config(project_root=tmp_path)
    assert cfg.telegram_bot_token == "abc123"


def test_telegram_skips_when_unconfigured(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("should not post")

    monkeypatch.setattr(telegram.requests, "post", boom)
    assert telegram.send_telegram("hello") is False


def test_telegram_failure_returns_false(monkeypatch):
    def refused(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests.Session, "post", refused)
    notify = telegram.telegram_notifier("token", "chat")
    assert notify("hello") is False


def test_telegram_truncates_long_alerts(monkeypatch):
    sent = {}

    class Ok:
        status_code = 200

    def capture(url, json=None, timeout=None):
        sent.update(json)
        return Ok()

    monkeypatch.setattr(telegram.requests, "post", capture)
    assert telegram.send_telegram("x" * 5000, "token", "chat") is True
    assert len(sent["text"]) == telegram.MAX_MESSAGE_LENGTH
    assert sent["text"].endswith("...")


def test_setup_logging_replaces_handlers(tmp_path):
    logger = setup_logging("DEBUG", tmp_path / "logs", "bot.log")
    logger = setup_logging("info", tmp_path / "logs", "bot.log")
    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in (tmp_path / "logs" / "bot.log").read_text(encoding="utf-8")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
