"""Shared fixtures and fakes for the test suite."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from equity_bot.core.errors import MarketDataError
from equity_bot.core.types import Candle, Position, Quote
from equity_bot.execution.base import MarketDataSource

NOW = datetime(2024, 3, 15, 15, 30, tzinfo=timezone.utc)


def make_candles(closes: Iterable[float], volumes: Optional[Iterable[int]] = None) -> List[Candle]:
    closes = list(closes)
    volumes = list(volumes) if volumes is not None else [1_000_000] * len(closes)
    start = NOW - timedelta(days=len(closes))
    return [
        Candle(date=start + timedelta(days=i), open=c, high=c + 1, low=c - 1, close=c, volume=v)
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


def make_position(symbol: str = "AAPL", **kwargs) -> Position:
    values = dict(
        symbol=symbol,
        quantity=10,
        entry_price=100.0,
        stop_loss=97.0,
        take_profit=106.0,
        current_price=100.0,
        peak_price=100.0,
        highest_price=100.0,
        created_at=NOW - timedelta(days=3),
    )
    values.update(kwargs)
    return Position(**values)


class FakeMarketData(MarketDataSource):
    """Quotes from a price map. Symbols in `failing` raise; symbols in `slow` hang."""

    def __init__(
        self,
        prices: Dict[str, float],
        candles: Optional[Dict[str, List[Candle]]] = None,
        failing: Iterable[str] = (),
        slow: Iterable[str] = (),
        candle_failing: Iterable[str] = (),
    ):
        self.prices = dict(prices)
        self.candles = candles or {}
        self.failing = set(failing)
        self.slow = set(slow)
        self.candle_failing = set(candle_failing)

    async def get_quote(self, symbol: str) -> Quote:
        if symbol in self.slow:
            await asyncio.sleep(5)
        if symbol in self.failing:
            raise MarketDataError(f"{symbol}: unavailable")
        return Quote(symbol=symbol, price=self.prices[symbol], timestamp=NOW)

    async def get_historical_candles(self, symbol: str, days: int) -> List[Candle]:
        if symbol in self.candle_failing:
            raise MarketDataError(f"{symbol}: history unavailable")
        return self.candles.get(symbol, [])[-days:]


@pytest.fixture
def now():
    return NOW
