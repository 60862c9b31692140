"""
One scheduled monitoring tick: update positions, evaluate sell signals,
alert, and hand auto-execute signals to the executor when auto trading is on.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from equity_bot.core.types import PositionStatus, SellSignal
from equity_bot.execution.base import TradeExecutor
from equity_bot.monitor.position_monitor import PositionMonitor, UpdateReport

logger = logging.getLogger("equity_bot.monitor.cycle")

Notifier = Callable[[str], bool]


@dataclass
class CycleResult:
    report: UpdateReport
    signals: List[SellSignal] = field(default_factory=list)
    executed: List[str] = field(default_factory=list)
    execution_failures: Dict[str, str] = field(default_factory=dict)


def format_signal(signal: SellSignal) -> str:
    return (
        f"SELL SIGNAL [{signal.symbol}]: {signal.reason} | Gain: {signal.current_gain:.2f}% "
        f"| Peak: {signal.peak_gain_percent:.2f}% | Trend: {signal.weekly_trend.value} "
        f"| Confidence: {signal.confidence * 100:.0f}%"
    )


async def _mark_pending_sell(monitor: PositionMonitor, signal: SellSignal) -> None:
    for position in await monitor.store.get_open_positions():
        if position.id == signal.position_id:
            position.status = PositionStatus.PENDING_SELL
            await monitor.store.save(position)
            return


async def run_monitoring_cycle(
    monitor: PositionMonitor,
    executor: Optional[TradeExecutor] = None,
    auto_trade_enabled: bool = False,
    notify: Optional[Notifier] = None,
) -> CycleResult:
    """Always completes; per-signal execution failures are logged and collected."""
    report = await monitor.update_all_positions()
    signals = await monitor.check_sell_signals()
    result = CycleResult(report=report, signals=signals)

    for signal in signals:
        message = format_signal(signal)
        logger.warning(message)
        if notify is not None:
            try:
                notify(message)
            except Exception:
                logger.exception("Alert for %s could not be sent", signal.symbol)

        if not (signal.auto_execute and auto_trade_enabled and executor is not None):
            continue
        try:
            order = await executor.execute_sell(signal)
        except Exception as e:
            logger.exception("Auto-sell failed for %s", signal.symbol)
            result.execution_failures[signal.symbol] = str(e)
            continue
        if not order.success:
            logger.error("Auto-sell rejected for %s: %s", signal.symbol, order.message)
            result.execution_failures[signal.symbol] = order.message or "rejected"
            continue
        logger.info("Auto-sold %s @ gain %.2f%%", signal.symbol, signal.current_gain_percent)
        result.executed.append(signal.symbol)
        try:
            await _mark_pending_sell(monitor, signal)
        except Exception:
            logger.exception("Could not mark %s as pending sell", signal.symbol)

    return result
