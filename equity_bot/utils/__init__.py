"""Utils: Telegram alerts."""

from equity_bot.utils.telegram import send_telegram, telegram_notifier

__all__ = ["send_telegram", "telegram_notifier"]
