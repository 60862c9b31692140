"""Telegram alerts for sell signals. Never log token or chat_id."""

from __future__ import annotations
import logging
from typing import Callable, Optional

import requests

logger = logging.getLogger("equity_bot.utils.telegram")

API_URL = "https://api.telegram.org/bot{token}/sendMessage"
MAX_MESSAGE_LENGTH = 4096


def _truncate(text: str) -> str:
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[: MAX_MESSAGE_LENGTH - 3] + "..."


def send_telegram(
    text: str,
    bot_token: str = "",
    chat_id: str = "",
    session: Optional[requests.Session] = None,
    timeout: float = 10.0,
) -> bool:
    """Post one alert. False when unconfigured or when Telegram refuses it; never raises."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, alert not sent (len=%d)", len(text))
        return False
    post = session.post if session is not None else requests.post
    try:
        r = post(
            API_URL.format(token=bot_token),
            json={"chat_id": chat_id, "text": _truncate(text), "disable_web_page_preview": True},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.warning("Telegram error: %s", type(e).__name__)
        return False
    if r.status_code != 200:
        logger.warning("Telegram send failed: HTTP %s", r.status_code)
        return False
    return True


def telegram_notifier(bot_token: str, chat_id: str) -> Callable[[str], bool]:
    """One-argument notifier for the monitoring cycle, sharing one HTTP session."""
    session = requests.Session()

    def notify(text: str) -> bool:
        return send_telegram(text, bot_token, chat_id, session=session)
    return notify
