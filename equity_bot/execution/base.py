"""Abstract collaborators: market data, position storage, sell execution."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from equity_bot.core.types import Candle, Position, Quote, SellSignal


@dataclass
class OrderResult:
    """Result of submitting a sell order."""
    success: bool
    order_id: Optional[str] = None
    avg_price: Optional[float] = None
    quantity: Optional[int] = None
    message: str = ""


class MarketDataSource(ABC):
    """Quotes and daily candles. "No data" is an empty list, not an exception."""

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Latest price for symbol."""

    @abstractmethod
    async def get_historical_candles(self, symbol: str, days: int) -> List[Candle]:
        """Up to `days` daily candles, oldest first."""


class PositionStore(ABC):
    """Position persistence with upsert semantics. No concurrency token."""

    @abstractmethod
    async def get_open_positions(self) -> List[Position]:
        """Positions with status Open."""

    @abstractmethod
    async def save(self, position: Position) -> Position:
        """Insert or replace by position id."""


class TradeExecutor(ABC):
    """Consumes sell signals; decides whether and how to place the order."""

    @abstractmethod
    async def execute_sell(self, signal: SellSignal) -> OrderResult:
        """Submit a sell for signal.quantity shares of signal.symbol."""
