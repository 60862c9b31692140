"""In-process store and paper executor, for dry runs and tests."""

from __future__ import annotations
import copy
import logging
import uuid
from typing import Dict, List

from equity_bot.core.types import Position, PositionStatus, SellSignal
from equity_bot.execution.base import OrderResult, PositionStore, TradeExecutor

logger = logging.getLogger("equity_bot.execution.memory")


class InMemoryPositionStore(PositionStore):
    """Dict-backed store. Returns copies so callers cannot mutate stored state in place."""

    def __init__(self, positions: List[Position] = None):
        self._positions: Dict[str, Position] = {}
        for p in positions or []:
            self._positions[p.id] = copy.deepcopy(p)

    async def get_open_positions(self) -> List[Position]:
        return [copy.deepcopy(p) for p in self._positions.values() if p.status == PositionStatus.OPEN]

    async def save(self, position: Position) -> Position:
        self._positions[position.id] = copy.deepcopy(position)
        return position

    def get(self, position_id: str) -> Position:
        return copy.deepcopy(self._positions[position_id])


class PaperTradeExecutor(TradeExecutor):
    """Accepts every sell and records it. Fills at no particular price."""

    def __init__(self):
        self.orders: List[SellSignal] = []

    async def execute_sell(self, signal: SellSignal) -> OrderResult:
        self.orders.append(signal)
        order_id = f"PAPER-{uuid.uuid4().hex[:8]}"
        logger.info("Paper sell %s x%d (%s)", signal.symbol, signal.quantity, order_id)
        return OrderResult(success=True, order_id=order_id, quantity=signal.quantity)
