"""Core: config, types, errors, logging."""

from equity_bot.core.config import load_config, Config
from equity_bot.core.errors import (
    EquityBotError,
    MarketDataError,
    PersistenceError,
    UnknownRiskProfileError,
)
from equity_bot.core.types import (
    Candle,
    DailySnapshot,
    Position,
    PositionStatus,
    Quote,
    SellSignal,
    TechnicalIndicators,
    TrendDirection,
)
from equity_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "EquityBotError",
    "MarketDataError",
    "PersistenceError",
    "UnknownRiskProfileError",
    "Candle",
    "DailySnapshot",
    "Position",
    "PositionStatus",
    "Quote",
    "SellSignal",
    "TechnicalIndicators",
    "TrendDirection",
    "setup_logging",
]
