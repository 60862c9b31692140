#!/usr/bin/env python3
"""
Equity bot CLI: size | indicators | monitor
Usage:
  python main.py size AAPL --price 150 --portfolio 10000 --cash 10000 [--profile Moderate]
  python main.py indicators AAPL [--days 60]
  python main.py monitor [--once] [--config config.yaml]
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from equity_bot.core.config import Config, load_config
from equity_bot.core.errors import UnknownRiskProfileError
from equity_bot.core.logger import setup_logging
from equity_bot.execution.memory import PaperTradeExecutor
from equity_bot.execution.yahoo import YahooMarketData
from equity_bot.execution.yaml_store import YamlPositionStore
from equity_bot.indicators.technical import compute_indicators
from equity_bot.monitor.cycle import run_monitoring_cycle
from equity_bot.monitor.position_monitor import PositionMonitor
from equity_bot.risk.manager import RiskManager, profile_from_setting
from equity_bot.utils.telegram import telegram_notifier

logger = logging.getLogger("equity_bot")


def _setup(config_path: Path | None) -> tuple[Config, RiskManager]:
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    return config, RiskManager(profile_from_setting(config.default_risk_profile))


def _market_data(config: Config) -> YahooMarketData:
    return YahooMarketData(timeout=config.market_data_timeout_seconds)


def run_size(args: argparse.Namespace) -> int:
    """Print sizing and gate results for a hypothetical entry."""
    _, risk_manager = _setup(args.config)
    try:
        decision = risk_manager.evaluate_entry(
            args.symbol.upper(), args.price, args.portfolio, args.cash,
            open_positions=args.open_positions, profile=args.profile,
        )
    except UnknownRiskProfileError as e:
        logger.error("%s", e)
        return 2
    calc = decision.calculation
    limits = risk_manager.config(calc.risk_profile)
    print(f"\n--- Position size: {calc.symbol} ({calc.risk_profile}) ---")
    print(
        f"Profile limits: risk {limits.max_risk_per_trade:.0%}/trade, position {limits.max_position_percent:.0%}, "
        f"max {limits.max_open_positions} open, min R:R {limits.min_risk_reward}"
    )
    print(f"Recommended quantity: {calc.recommended_quantity} (cash max {calc.max_quantity})")
    print(f"Position value: ${calc.position_value:.2f}")
    print(f"Stop loss: ${calc.stop_loss_price:.2f} | Take profit: ${calc.take_profit_price:.2f}")
    print(f"Capital risked: ${calc.capital_risked:.2f} | R:R {calc.risk_reward_ratio:.2f}:1")
    if decision.allowed:
        print("Entry allowed")
        return 0
    print(f"Entry blocked [{decision.code}]: {decision.reason}")
    return 2


def run_indicators(args: argparse.Namespace) -> int:
    config, _ = _setup(args.config)
    symbol = args.symbol.upper()
    candles = _market_data(config).fetch_candles(symbol, args.days or config.history_days)
    if not candles:
        logger.error("No candles for %s", symbol)
        return 1
    ind = compute_indicators(candles, symbol)
    print(f"\n--- Indicators: {symbol} ({len(candles)} candles) ---")
    print(f"RSI(14): {ind.rsi:.2f}")
    print(f"MACD: {ind.macd.value:.4f} signal {ind.macd.signal:.4f} hist {ind.macd.histogram:.4f}")
    bb = ind.bollinger_bands
    print(f"Bollinger: {bb.lower:.2f} / {bb.middle:.2f} / {bb.upper:.2f}")
    print(f"SMA20 {ind.sma20:.2f} | SMA50 {ind.sma50:.2f} | EMA12 {ind.ema12:.2f} | EMA26 {ind.ema26:.2f}")
    print(f"Volume {ind.volume} | Avg20 {ind.volume_avg20}")
    return 0


async def _monitor(config: Config, risk_manager: RiskManager, once: bool) -> None:
    monitor = PositionMonitor(
        store=YamlPositionStore(config.positions_file),
        market_data=_market_data(config),
        risk_manager=risk_manager,
        fetch_timeout=config.fetch_timeout_seconds,
        snapshot_days=config.snapshot_days,
    )
    executor = PaperTradeExecutor()
    notify = telegram_notifier(config.telegram_bot_token, config.telegram_chat_id)
    while True:
        result = await run_monitoring_cycle(monitor, executor, config.auto_trade_enabled, notify)
        r = result.report
        logger.info(
            "Cycle done: %d updated, %d skipped, %d failed, %d signals, %d auto-sold",
            len(r.updated), len(r.skipped), len(r.failed), len(result.signals), len(result.executed),
        )
        if once:
            return
        await asyncio.sleep(config.interval_seconds)


def run_monitor(args: argparse.Namespace) -> int:
    config, risk_manager = _setup(args.config)
    try:
        asyncio.run(_monitor(config, risk_manager, args.once))
    except KeyboardInterrupt:
        logger.info("Shutdown by user")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Equity Bot CLI")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="mode", required=True)

    size = sub.add_parser("size", help="Position size and entry checks")
    size.add_argument("symbol")
    size.add_argument("--price", type=float, required=True)
    size.add_argument("--portfolio", type=float, required=True)
    size.add_argument("--cash", type=float, required=True)
    size.add_argument("--open-positions", type=int, default=0)
    size.add_argument("--profile", default=None, help="Conservative | Moderate | Aggressive | VeryAggressive")

    ind = sub.add_parser("indicators", help="Technical indicators from daily candles")
    ind.add_argument("symbol")
    ind.add_argument("--days", type=int, default=None)

    mon = sub.add_parser("monitor", help="Monitor open positions")
    mon.add_argument("--once", action="store_true", help="Run a single cycle")

    args = parser.parse_args()
    if args.mode == "size":
        return run_size(args)
    if args.mode == "indicators":
        return run_indicators(args)
    return run_monitor(args)


if __name__ == "__main__":
    exit(main())
