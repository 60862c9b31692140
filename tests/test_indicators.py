"""Unit tests for indicators.technical."""

import math

import pandas as pd
import pytest

from equity_bot.indicators.technical import (
    bollinger_bands,
    compute_indicators,
    ema,
    rsi,
    sma,
)
from tests.conftest import make_candles


def test_rsi_declining_series_below_forty():
    closes = [100 - i * 1.5 for i in range(30)]
    ind = compute_indicators(make_candles(closes), "TEST")
    assert ind.rsi < 40


def test_rsi_flat_series_is_neutral():
    ind = compute_indicators(make_candles([100.0] * 30))
    assert ind.rsi == pytest.approx(50.0)


def test_rsi_rising_series_is_100():
    ind = compute_indicators(make_candles([100 + i for i in range(20)]))
    assert ind.rsi == 100.0


def test_rsi_short_history_defaults_to_50():
    assert rsi(pd.Series([100.0 + i for i in range(14)])) == 50.0


def test_rsi_uses_plain_average_of_last_14_moves():
    # 15 closes: moves alternate +2 / -1 -> 7 gains of 2, 7 losses of 1
    closes = [100.0]
    for i in range(14):
        closes.append(closes[-1] + (2.0 if i % 2 == 0 else -1.0))
    rs = (14 / 14) / (7 / 14)
    assert rsi(pd.Series(closes)) == pytest.approx(100 - 100 / (1 + rs))


def test_rsi_bounds_on_mixed_series():
    closes = [100 + 5 * math.sin(i / 3) for i in range(60)]
    value = rsi(pd.Series(closes))
    assert 0.0 <= value <= 100.0


def test_bollinger_constant_series_collapses():
    ind = compute_indicators(make_candles([100.0] * 30))
    bb = ind.bollinger_bands
    assert bb.middle == 100.0
    assert bb.upper == bb.middle == bb.lower


def test_bollinger_population_std():
    closes = pd.Series([float(i) for i in range(1, 21)])
    bb = bollinger_bands(closes)
    std = math.sqrt(399 / 12)
    assert bb.middle == pytest.approx(10.5)
    assert bb.upper == pytest.approx(10.5 + 2 * std)
    assert bb.lower == pytest.approx(10.5 - 2 * std)


def test_bollinger_short_history_uses_sma():
    bb = bollinger_bands(pd.Series([1.0, 2.0, 3.0]))
    assert bb.upper == bb.middle == bb.lower == pytest.approx(2.0)


def test_sma_short_history_averages_available():
    assert sma(pd.Series([1.0, 2.0, 3.0]), 20) == pytest.approx(2.0)
    assert sma(pd.Series([float(i) for i in range(1, 31)]), 20) == pytest.approx(20.5)


def test_ema_seeded_with_sma():
    closes = [float(i) for i in range(1, 31)]
    period = 12
    expected = sum(closes[:period]) / period
    k = 2 / (period + 1)
    for price in closes[period:]:
        expected = (price - expected) * k + expected
    assert ema(pd.Series(closes), period) == pytest.approx(expected)


def test_ema_short_history_is_mean():
    assert ema(pd.Series([2.0, 4.0]), 12) == pytest.approx(3.0)


def test_macd_signal_is_fixed_ratio():
    closes = [100 + i * 0.5 for i in range(40)]
    ind = compute_indicators(make_candles(closes))
    assert ind.macd.value == pytest.approx(ind.ema12 - ind.ema26)
    assert ind.macd.signal == pytest.approx(ind.macd.value * 0.9)
    assert ind.macd.histogram == pytest.approx(ind.macd.value * 0.1)


def test_volume_average_last_20():
    volumes = list(range(1, 26))
    ind = compute_indicators(make_candles([100.0] * 25, volumes))
    assert ind.volume == 25
    assert ind.volume_avg20 == 15  # mean(6..25) = 15.5, truncated


def test_volume_average_short_history():
    ind = compute_indicators(make_candles([100.0] * 4, [10, 20, 30, 41]))
    assert ind.volume_avg20 == 25


def test_empty_candles_are_neutral():
    ind = compute_indicators([])
    assert ind.rsi == 50.0
    assert ind.sma20 == 0.0
    assert ind.macd.value == 0.0
    assert ind.volume == 0
    assert ind.volume_avg20 == 0


def test_indicators_are_deterministic():
    candles = make_candles([100 + (i % 7) - 3 for i in range(60)])
    assert compute_indicators(candles) == compute_indicators(candles)
