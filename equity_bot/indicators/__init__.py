"""Indicators: technical indicator engine over daily candles."""

from equity_bot.indicators.technical import (
    candles_to_frame,
    compute_indicators,
    indicators_from_frame,
)

__all__ = ["candles_to_frame", "compute_indicators", "indicators_from_frame"]
