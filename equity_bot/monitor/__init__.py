"""Monitor: per-position state updates and sell-signal evaluation."""

from equity_bot.monitor.cycle import CycleResult, format_signal, run_monitoring_cycle
from equity_bot.monitor.position_monitor import (
    PositionMonitor,
    UpdateReport,
    apply_price_update,
    determine_weekly_trend,
    evaluate_sell_signal,
    open_position,
)

__all__ = [
    "CycleResult",
    "PositionMonitor",
    "UpdateReport",
    "apply_price_update",
    "determine_weekly_trend",
    "evaluate_sell_signal",
    "format_signal",
    "open_position",
    "run_monitoring_cycle",
]
