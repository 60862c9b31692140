"""
Position sizing, trailing stops, and the partial-profit ladder.
Every function is total: zero or negative inputs yield zero quantities
instead of raising.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from equity_bot.risk.profiles import RiskProfile, get_config, parse_risk_profile

PARTIAL_PROFIT_FRACTION = 0.5


@dataclass
class RiskCalculation:
    """Sizing decision for a long entry at current_price."""
    symbol: str
    current_price: float
    risk_profile: str
    portfolio_value: float
    cash_available: float
    recommended_quantity: int
    max_quantity: int
    position_value: float
    capital_risked: float
    stop_loss_price: float
    take_profit_price: float
    risk_reward_ratio: float


def _floor_div(numerator: float, denominator: float) -> int:
    if not denominator > 0:
        return 0
    quotient = numerator / denominator
    if not math.isfinite(quotient):
        return 0
    return max(0, math.floor(quotient))


def calculate_position_size(
    symbol: str,
    current_price: float,
    portfolio_value: float,
    cash_available: float,
    profile: Union[str, RiskProfile],
) -> RiskCalculation:
    """
    Shares to buy: the smaller of the risk-budget and position-size limits,
    capped by cash. One share is forced when cash covers it but the limits
    round down to zero.
    """
    profile = parse_risk_profile(profile)
    config = get_config(profile)

    stop_loss_price = current_price * (1 - config.stop_loss_percent)
    take_profit_price = current_price * (1 + config.stop_loss_percent * config.min_risk_reward)

    max_position_value = portfolio_value * config.max_position_percent
    max_capital_risk = portfolio_value * config.max_risk_per_trade

    risk_per_share = current_price - stop_loss_price
    qty_by_risk = _floor_div(max_capital_risk, risk_per_share)
    qty_by_position = _floor_div(max_position_value, current_price)
    max_quantity = _floor_div(cash_available, current_price)

    quantity = min(qty_by_risk, qty_by_position, max_quantity)
    finite = all(math.isfinite(v) for v in (current_price, portfolio_value, cash_available))
    if quantity < 1 and finite and 0 < current_price <= cash_available:
        quantity = 1

    risk_reward = (take_profit_price - current_price) / risk_per_share if risk_per_share > 0 else 0.0

    return RiskCalculation(
        symbol=symbol,
        current_price=current_price,
        risk_profile=profile.value,
        portfolio_value=portfolio_value,
        cash_available=cash_available,
        recommended_quantity=quantity,
        max_quantity=max_quantity,
        position_value=quantity * current_price if quantity else 0.0,
        capital_risked=quantity * risk_per_share if quantity else 0.0,
        stop_loss_price=stop_loss_price,
        take_profit_price=take_profit_price,
        risk_reward_ratio=risk_reward,
    )


def calculate_trailing_stop(
    entry_price: float,
    current_price: float,
    current_stop_loss: float,
    profile: Union[str, RiskProfile],
) -> float:
    """Stop trails price once in profit. Never returns less than current_stop_loss."""
    config = get_config(profile)
    if current_price > entry_price:
        candidate = current_price * (1 - config.trailing_stop_percent)
        if candidate > current_stop_loss:
            return candidate
    return current_stop_loss


def should_take_partial_profits(
    entry_price: float,
    current_price: float,
    profile: Union[str, RiskProfile],
) -> Tuple[bool, Optional[float]]:
    """(True, 0.5) once gain reaches any ladder level, else (False, None)."""
    config = get_config(profile)
    if entry_price <= 0:
        return False, None
    gain = (current_price - entry_price) / entry_price
    for level in config.partial_profit_levels:
        if gain >= level:
            return True, PARTIAL_PROFIT_FRACTION
    return False, None
