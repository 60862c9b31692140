"""
Core data types for candles, indicators, positions, and sell signals.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PositionStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    PENDING_SELL = "PendingSell"


class TrendDirection(str, Enum):
    UP = "Up"
    DOWN = "Down"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class Candle:
    """Daily OHLCV candle."""
    date: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class Quote:
    """Last traded price for a symbol."""
    symbol: str
    price: float
    timestamp: datetime


@dataclass
class MacdData:
    value: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass
class BollingerBands:
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0


@dataclass
class TechnicalIndicators:
    """Indicator set derived from a candle window. Never persisted."""
    rsi: float = 50.0
    macd: MacdData = field(default_factory=MacdData)
    bollinger_bands: BollingerBands = field(default_factory=BollingerBands)
    sma20: float = 0.0
    sma50: float = 0.0
    ema12: float = 0.0
    ema26: float = 0.0
    volume: int = 0
    volume_avg20: int = 0


@dataclass(frozen=True)
class DailySnapshot:
    """End-of-day record appended to a position. `price` mirrors the close."""
    date: datetime
    open_price: float
    high_price: float
    low_price: float
    close_price: float
    volume: int
    unrealized_pnl: float
    unrealized_pnl_percent: float

    @property
    def price(self) -> float:
        return self.close_price


@dataclass
class Position:
    """Open position state, mutated every monitoring cycle."""
    symbol: str
    quantity: int
    entry_price: float
    stop_loss: float
    take_profit: float
    current_price: float = 0.0
    peak_price: float = 0.0
    highest_price: Optional[float] = None
    trailing_stop_price: Optional[float] = None
    unrealized_pnl: float = 0.0
    unrealized_pnl_percent: float = 0.0
    stop_loss_distance: float = 0.0
    take_profit_distance: float = 0.0
    days_held: int = 0
    daily_snapshots: List[DailySnapshot] = field(default_factory=list)
    status: PositionStatus = PositionStatus.OPEN
    account_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    entry_date: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)
    last_updated: datetime = field(default_factory=utcnow)


@dataclass
class SellSignal:
    """Exit recommendation for one position. Consumed once by the caller."""
    symbol: str
    quantity: int
    reason: str
    confidence: float
    auto_execute: bool
    current_gain_percent: float
    peak_gain_percent: float
    weekly_trend: TrendDirection = TrendDirection.NEUTRAL
    account_id: Optional[str] = None
    position_id: Optional[str] = None

    @property
    def current_gain(self) -> float:
        return self.current_gain_percent
