"""Execution: collaborator interfaces and adapters (YAML store, paper executor, Yahoo data)."""

from equity_bot.execution.base import MarketDataSource, OrderResult, PositionStore, TradeExecutor
from equity_bot.execution.memory import InMemoryPositionStore, PaperTradeExecutor
from equity_bot.execution.yahoo import YahooMarketData
from equity_bot.execution.yaml_store import YamlPositionStore

__all__ = [
    "InMemoryPositionStore",
    "MarketDataSource",
    "OrderResult",
    "PaperTradeExecutor",
    "PositionStore",
    "TradeExecutor",
    "YahooMarketData",
    "YamlPositionStore",
]
