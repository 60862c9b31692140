"""
Position monitor: refreshes open positions from live quotes (trailing stop,
peak price, P&L, daily snapshot) and evaluates sell signals.

The monitor never closes a position; it only emits SellSignals. Each
position is processed independently: a failed fetch or save for one
symbol is logged and reported, never raised.
"""

from __future__ import annotations
import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

from equity_bot.core.types import (
    DailySnapshot,
    Position,
    SellSignal,
    TrendDirection,
    utcnow,
)
from equity_bot.execution.base import MarketDataSource, PositionStore
from equity_bot.risk.manager import ProfileArg, RiskManager
from equity_bot.risk.sizing import PARTIAL_PROFIT_FRACTION, RiskCalculation

logger = logging.getLogger("equity_bot.monitor")

T = TypeVar("T")

DRAWDOWN_MIN_PEAK_GAIN = 10.0
DRAWDOWN_RETAIN_RATIO = 0.5
TREND_WINDOW_DAYS = 7
TREND_THRESHOLD_PCT = 2.0


@dataclass
class UpdateReport:
    """Outcome of one update pass. failed maps symbol -> error text."""
    updated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.updated) + len(self.skipped) + len(self.failed)


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def is_valid_price(price: object) -> bool:
    """A usable quote: a finite number above zero."""
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    return math.isfinite(price) and price > 0


def gain_percent(entry_price: float, price: float) -> float:
    if entry_price <= 0:
        return 0.0
    return (price - entry_price) / entry_price * 100


def open_position(
    symbol: str,
    quantity: int,
    fill_price: float,
    calculation: RiskCalculation,
    stop_loss: Optional[float] = None,
    take_profit: Optional[float] = None,
    account_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Position:
    """Open position record for a filled buy. Levels default to the sizing result."""
    now = now or utcnow()
    return Position(
        symbol=symbol.upper(),
        quantity=quantity,
        entry_price=fill_price,
        current_price=fill_price,
        stop_loss=calculation.stop_loss_price if stop_loss is None else stop_loss,
        take_profit=calculation.take_profit_price if take_profit is None else take_profit,
        peak_price=fill_price,
        highest_price=fill_price,
        account_id=account_id,
        entry_date=now,
        created_at=now,
        last_updated=now,
    )


def apply_price_update(
    position: Position,
    price: float,
    risk_manager: RiskManager,
    now: datetime,
    profile: ProfileArg = None,
) -> bool:
    """Mutate position for a new price. Returns True when the trailing stop moved."""
    moved = False
    new_stop = risk_manager.calculate_trailing_stop(position.entry_price, price, position.stop_loss, profile)
    if new_stop > position.stop_loss:
        position.stop_loss = new_stop
        position.trailing_stop_price = new_stop
        moved = True
        logger.info("Trailing stop updated for %s: $%.2f", position.symbol, new_stop)

    if position.highest_price is None or price > position.highest_price:
        position.highest_price = price
    if price > position.peak_price:
        position.peak_price = price

    position.current_price = price
    position.unrealized_pnl = (price - position.entry_price) * position.quantity
    position.unrealized_pnl_percent = gain_percent(position.entry_price, price)
    position.days_held = max(0, int((now - _as_utc(position.created_at)).total_seconds() // 86400))
    position.stop_loss_distance = price - position.stop_loss
    position.take_profit_distance = position.take_profit - price
    position.last_updated = now
    return moved


def determine_weekly_trend(position: Position, now: datetime) -> TrendDirection:
    """Close-to-close change across snapshots from the last 7 days."""
    if len(position.daily_snapshots) < 2:
        return TrendDirection.NEUTRAL
    cutoff = now - timedelta(days=TREND_WINDOW_DAYS)
    recent = sorted(
        (s for s in position.daily_snapshots if _as_utc(s.date) >= cutoff),
        key=lambda s: _as_utc(s.date),
    )
    if len(recent) < 2:
        return TrendDirection.NEUTRAL
    first, last = recent[0].price, recent[-1].price
    if first <= 0:
        return TrendDirection.NEUTRAL
    change = (last - first) / first * 100
    if change > TREND_THRESHOLD_PCT:
        return TrendDirection.UP
    if change < -TREND_THRESHOLD_PCT:
        return TrendDirection.DOWN
    return TrendDirection.NEUTRAL


def evaluate_sell_signal(
    position: Position,
    risk_manager: RiskManager,
    now: datetime,
    profile: ProfileArg = None,
) -> Optional[SellSignal]:
    """
    First matching rule wins:
    stop loss, take profit, trailing stop, drawdown from peak, partial profit.
    """
    if position.entry_price <= 0 or not is_valid_price(position.current_price):
        return None
    price = position.current_price
    gain_pct = gain_percent(position.entry_price, price)
    peak_gain_pct = gain_percent(position.entry_price, position.peak_price) if position.peak_price > 0 else gain_pct
    trend = determine_weekly_trend(position, now)

    def signal(reason: str, confidence: float, auto_execute: bool, quantity: int = position.quantity) -> SellSignal:
        return SellSignal(
            symbol=position.symbol,
            quantity=quantity,
            reason=reason,
            confidence=confidence,
            auto_execute=auto_execute,
            current_gain_percent=gain_pct,
            peak_gain_percent=peak_gain_pct,
            weekly_trend=trend,
            account_id=position.account_id,
            position_id=position.id,
        )

    if price <= position.stop_loss:
        return signal(f"Stop loss hit (${price:.2f} <= ${position.stop_loss:.2f})", 1.0, True)

    if price >= position.take_profit:
        return signal(f"Take profit hit (${price:.2f} >= ${position.take_profit:.2f})", 1.0, True)

    if position.trailing_stop_price is not None and price <= position.trailing_stop_price:
        return signal(f"Trailing stop hit (${price:.2f} <= ${position.trailing_stop_price:.2f})", 0.95, True)

    if peak_gain_pct > DRAWDOWN_MIN_PEAK_GAIN and gain_pct < peak_gain_pct * DRAWDOWN_RETAIN_RATIO:
        return signal(
            f"Significant drawdown: {peak_gain_pct:.1f}% peak -> {gain_pct:.1f}% current", 0.75, False,
        )

    should_take, fraction = risk_manager.should_take_partial_profits(position.entry_price, price, profile)
    if should_take:
        qty = int(position.quantity * (fraction or PARTIAL_PROFIT_FRACTION))
        return signal(f"Partial profit target reached ({gain_pct:.1f}% gain)", 0.80, False, quantity=qty)

    return None


class PositionMonitor:
    """
    Runs update and sell-signal passes over the store's open positions.
    Positions within a pass are processed concurrently. Update passes on
    one instance are serialized, so overlapping triggers never save stale
    copies over each other.
    """

    def __init__(
        self,
        store: PositionStore,
        market_data: MarketDataSource,
        risk_manager: RiskManager,
        fetch_timeout: float = 10.0,
        snapshot_days: int = 2,
        profile: ProfileArg = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.market_data = market_data
        self.risk_manager = risk_manager
        self.fetch_timeout = fetch_timeout
        self.snapshot_days = snapshot_days
        self.profile = profile
        self._clock = clock
        self._update_lock = asyncio.Lock()

    async def _fetch(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.fetch_timeout)

    async def _append_snapshot(self, position: Position, now: datetime) -> None:
        try:
            candles = await self._fetch(self.market_data.get_historical_candles(position.symbol, self.snapshot_days))
        except asyncio.TimeoutError:
            logger.warning("Historical data fetch timed out for %s", position.symbol)
            return
        except Exception as e:
            logger.warning("Failed to fetch historical data for %s: %s", position.symbol, e)
            return
        if not candles:
            return
        latest = candles[-1]
        position.daily_snapshots.append(DailySnapshot(
            date=now.replace(hour=0, minute=0, second=0, microsecond=0),
            open_price=latest.open,
            high_price=latest.high,
            low_price=latest.low,
            close_price=latest.close,
            volume=latest.volume,
            unrealized_pnl=position.unrealized_pnl,
            unrealized_pnl_percent=position.unrealized_pnl_percent,
        ))

    async def _refresh(self, position: Position, report: UpdateReport) -> None:
        symbol = position.symbol
        try:
            quote = await self._fetch(self.market_data.get_quote(symbol))
        except asyncio.TimeoutError:
            logger.warning("Quote fetch timed out for %s, keeping last values", symbol)
            report.skipped.append(symbol)
            return
        except Exception as e:
            logger.warning("Quote unavailable for %s, keeping last values: %s", symbol, e)
            report.skipped.append(symbol)
            return
        if not is_valid_price(quote.price):
            logger.warning("Invalid quote for %s (%r), keeping last values", symbol, quote.price)
            report.skipped.append(symbol)
            return

        now = self._clock()
        apply_price_update(position, float(quote.price), self.risk_manager, now, self.profile)
        await self._append_snapshot(position, now)
        await self.store.save(position)
        report.updated.append(symbol)

    async def update_position(self, position: Position, report: UpdateReport) -> None:
        """Refresh one position and save it. Outcome goes into report; never raises."""
        try:
            await self._refresh(position, report)
        except Exception as e:
            logger.exception("Failed to update position for %s", position.symbol)
            report.failed[position.symbol] = str(e)

    async def update_all_positions(self) -> UpdateReport:
        """Refresh every open position. Always returns; failures are in the report."""
        report = UpdateReport()
        async with self._update_lock:
            try:
                positions = await self.store.get_open_positions()
            except Exception as e:
                logger.exception("Could not load open positions")
                report.error = str(e)
                return report
            logger.info("Updating %d open positions", len(positions))
            await asyncio.gather(*(self.update_position(p, report) for p in positions))
        return report

    async def check_sell_signals(self) -> List[SellSignal]:
        """Sell signals for open positions at their last known price."""
        try:
            positions = await self.store.get_open_positions()
        except Exception:
            logger.exception("Could not load open positions")
            return []
        now = self._clock()
        signals: List[SellSignal] = []
        for position in positions:
            try:
                sig = evaluate_sell_signal(position, self.risk_manager, now, self.profile)
            except Exception:
                logger.exception("Could not evaluate sell signal for %s", position.symbol)
                continue
            if sig is not None:
                signals.append(sig)
                logger.warning("SELL SIGNAL [%s]: %s", position.symbol, sig.reason)
        return signals
