"""
Quotes and daily candles from Yahoo Finance through yfinance, retried when
Yahoo rate-limits. yfinance blocks, so the async methods run it in a worker
thread.
"""

from __future__ import annotations
import asyncio
import logging
import math
import time
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Callable, List

import pandas as pd
import yfinance as yf
from yfinance.exceptions import YFRateLimitError

from equity_bot.core.errors import MarketDataError
from equity_bot.core.types import Candle, Quote
from equity_bot.execution.base import MarketDataSource

logger = logging.getLogger("equity_bot.execution.yahoo")

PRICE_COLUMNS = ["Open", "High", "Low", "Close"]


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on YFRateLimitError with exponential back-off."""
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except YFRateLimitError:
                    if attempt == max_retries - 1:
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                    time.sleep(delay)
        return wrapped
    return decorator


def history_to_candles(history: pd.DataFrame) -> List[Candle]:
    """Candles from a Ticker.history frame, oldest first. Rows missing a price are dropped."""
    if history is None or history.empty:
        return []
    missing = [c for c in PRICE_COLUMNS if c not in history.columns]
    if missing:
        raise MarketDataError(f"history missing columns {missing}")
    frame = history.dropna(subset=PRICE_COLUMNS).sort_index()
    candles: List[Candle] = []
    for ts, row in frame.iterrows():
        when = pd.Timestamp(ts)
        when = when.tz_localize("UTC") if when.tzinfo is None else when.tz_convert("UTC")
        volume = row["Volume"] if "Volume" in frame.columns else 0
        candles.append(Candle(
            date=when.to_pydatetime(),
            open=float(row["Open"]),
            high=float(row["High"]),
            low=float(row["Low"]),
            close=float(row["Close"]),
            volume=int(volume) if pd.notna(volume) else 0,
        ))
    return candles


class YahooMarketData(MarketDataSource):
    """Daily equity data. Failures raise MarketDataError; an unknown symbol has no candles."""

    def __init__(self, timeout: float = 10.0, ticker_factory: Callable[[str], Any] = yf.Ticker):
        self.timeout = timeout
        self._ticker = ticker_factory

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _history(self, symbol: str, start: datetime) -> pd.DataFrame:
        return self._ticker(symbol).history(
            start=start.strftime("%Y-%m-%d"), interval="1d", auto_adjust=False, timeout=self.timeout,
        )

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _last_price(self, symbol: str) -> Any:
        return self._ticker(symbol).fast_info.last_price

    def fetch_candles(self, symbol: str, days: int) -> List[Candle]:
        if days <= 0:
            return []
        # Calendar window twice the trading-day count covers weekends and holidays.
        start = datetime.now(timezone.utc) - timedelta(days=days * 2 + 7)
        try:
            history = self._history(symbol, start)
        except Exception as e:
            raise MarketDataError(f"{symbol}: {e}") from e
        candles = history_to_candles(history)
        if not candles:
            logger.warning("No historical data for %s", symbol)
        return candles[-days:]

    def fetch_quote(self, symbol: str) -> Quote:
        try:
            raw = self._last_price(symbol)
            price = math.nan if raw is None else float(raw)
        except Exception as e:
            raise MarketDataError(f"{symbol}: {e}") from e
        if not math.isfinite(price):
            raise MarketDataError(f"{symbol}: no quote available")
        return Quote(symbol=symbol, price=price, timestamp=datetime.now(timezone.utc))

    async def get_quote(self, symbol: str) -> Quote:
        return await asyncio.to_thread(self.fetch_quote, symbol)

    async def get_historical_candles(self, symbol: str, days: int) -> List[Candle]:
        return await asyncio.to_thread(self.fetch_candles, symbol, days)
