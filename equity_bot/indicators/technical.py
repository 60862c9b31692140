"""
Technical indicators from daily candles: RSI(14), MACD, Bollinger(20),
SMA20/50, EMA12/26, 20-day volume average.
Short history never raises; each indicator falls back to what is available.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from equity_bot.core.types import BollingerBands, Candle, MacdData, TechnicalIndicators

logger = logging.getLogger("equity_bot.indicators")

CANDLE_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
MIN_CANDLES = 50
RSI_PERIOD = 14
BOLLINGER_PERIOD = 20
VOLUME_PERIOD = 20
# Fixed-ratio stand-in for a 9-period EMA of the MACD line.
MACD_SIGNAL_RATIO = 0.9


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """OHLCV DataFrame, oldest first, in input order."""
    rows = [
        {"date": c.date, "open": c.open, "high": c.high, "low": c.low, "close": c.close, "volume": c.volume}
        for c in candles
    ]
    return pd.DataFrame(rows, columns=CANDLE_COLUMNS)


def sma(closes: pd.Series, period: int) -> float:
    """Mean of the last `period` closes, or of all closes when fewer."""
    if closes.empty:
        return 0.0
    return float(closes.tail(period).mean())


def ema(closes: pd.Series, period: int) -> float:
    """EMA seeded with the SMA of the first `period` closes."""
    if closes.empty:
        return 0.0
    if len(closes) < period:
        return float(closes.mean())
    seed = closes.iloc[:period].mean()
    seeded = pd.concat([pd.Series([seed]), closes.iloc[period:]], ignore_index=True)
    return float(seeded.ewm(alpha=2.0 / (period + 1), adjust=False).mean().iloc[-1])


def rsi(closes: pd.Series, period: int = RSI_PERIOD) -> float:
    """
    RSI from a plain average of the last `period` up and down moves.
    Neutral 50 with fewer than period + 1 closes or when price never moved.
    """
    if len(closes) < period + 1:
        return 50.0
    delta = closes.diff().iloc[1:]
    avg_gain = float(delta.clip(lower=0).tail(period).mean())
    avg_loss = float((-delta).clip(lower=0).tail(period).mean())
    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def macd(closes: pd.Series) -> MacdData:
    value = ema(closes, 12) - ema(closes, 26)
    signal = value * MACD_SIGNAL_RATIO
    return MacdData(value=value, signal=signal, histogram=value - signal)


def bollinger_bands(closes: pd.Series, period: int = BOLLINGER_PERIOD) -> BollingerBands:
    """Middle = SMA; bands at 2 population standard deviations. Collapsed when short."""
    middle = sma(closes, period)
    recent = closes.tail(period)
    if len(recent) < period:
        return BollingerBands(upper=middle, middle=middle, lower=middle)
    std = float(np.sqrt(((recent - middle) ** 2).mean()))
    return BollingerBands(upper=middle + 2 * std, middle=middle, lower=middle - 2 * std)


def volume_average(volumes: pd.Series, period: int = VOLUME_PERIOD) -> int:
    if volumes.empty:
        return 0
    return int(volumes.tail(period).mean())


def indicators_from_frame(df: pd.DataFrame, symbol: Optional[str] = None) -> TechnicalIndicators:
    """Indicator set for the last row of an OHLCV frame. Pure; no lookahead past the frame."""
    if len(df) < MIN_CANDLES:
        logger.warning("Insufficient data for %s: %d candles", symbol or "symbol", len(df))
    closes = df["close"].astype(float).reset_index(drop=True)
    volumes = df["volume"].astype(float).reset_index(drop=True)
    result = TechnicalIndicators(
        rsi=rsi(closes, RSI_PERIOD),
        macd=macd(closes),
        bollinger_bands=bollinger_bands(closes, BOLLINGER_PERIOD),
        sma20=sma(closes, 20),
        sma50=sma(closes, 50),
        ema12=ema(closes, 12),
        ema26=ema(closes, 26),
        volume=int(volumes.iloc[-1]) if not volumes.empty else 0,
        volume_avg20=volume_average(volumes, VOLUME_PERIOD),
    )
    logger.debug("Calculated indicators for %s: RSI=%.2f, MACD=%.2f", symbol, result.rsi, result.macd.value)
    return result


def compute_indicators(candles: Iterable[Candle], symbol: Optional[str] = None) -> TechnicalIndicators:
    """Indicator set from candles ordered oldest to newest."""
    return indicators_from_frame(candles_to_frame(candles), symbol)
