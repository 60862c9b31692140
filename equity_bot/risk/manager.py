"""
Risk manager: binds a default risk profile and runs sizing plus the
pre-trade gates. The profile is an explicit constructor value; each call
may override it.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from equity_bot.core.errors import UnknownRiskProfileError
from equity_bot.risk import gate, sizing
from equity_bot.risk.profiles import RiskProfile, RiskProfileConfig, get_config, parse_risk_profile
from equity_bot.risk.sizing import RiskCalculation

logger = logging.getLogger("equity_bot.risk")

ProfileArg = Optional[Union[str, RiskProfile]]


@dataclass
class EntryDecision:
    """Result of pre-trade checks: allowed or rejected + reason and code."""
    allowed: bool
    quantity: int = 0
    reason: str = ""
    code: str = ""
    calculation: Optional[RiskCalculation] = None


def profile_from_setting(value: Optional[str], fallback: RiskProfile = RiskProfile.MODERATE) -> RiskProfile:
    """Parse a configured profile name; unparsable settings fall back with a warning."""
    if not value:
        return fallback
    try:
        return parse_risk_profile(value)
    except UnknownRiskProfileError:
        logger.warning("Unknown default risk profile %r, using %s", value, fallback.value)
        return fallback


class RiskManager:
    """
    Sizing, trailing stop, partial profits, and trade gates for one default
    profile. Stateless apart from that profile.
    """

    def __init__(self, default_profile: Union[str, RiskProfile] = RiskProfile.MODERATE):
        self.default_profile = parse_risk_profile(default_profile)
        logger.info("Risk management initialized with default profile: %s", self.default_profile.value)

    def _profile(self, profile: ProfileArg) -> RiskProfile:
        return self.default_profile if profile is None else parse_risk_profile(profile)

    def config(self, profile: ProfileArg = None) -> RiskProfileConfig:
        return get_config(self._profile(profile))

    def calculate_position_size(
        self,
        symbol: str,
        current_price: float,
        portfolio_value: float,
        cash_available: float,
        profile: ProfileArg = None,
    ) -> RiskCalculation:
        resolved = self._profile(profile)
        logger.debug("Calculating position size for %s with %s profile", symbol, resolved.value)
        calc = sizing.calculate_position_size(symbol, current_price, portfolio_value, cash_available, resolved)
        logger.info(
            "Position calculation for %s: Qty=%d, Value=$%.2f, Risk=$%.2f, R:R=%.2f",
            symbol, calc.recommended_quantity, calc.position_value, calc.capital_risked, calc.risk_reward_ratio,
        )
        return calc

    def can_open_position(self, current_open_positions: int, profile: ProfileArg = None) -> Tuple[bool, Optional[str]]:
        return gate.can_open_position(current_open_positions, self._profile(profile))

    def meets_risk_reward_requirements(self, ratio: float, profile: ProfileArg = None) -> Tuple[bool, Optional[str]]:
        return gate.meets_risk_reward_requirements(ratio, self._profile(profile))

    def calculate_trailing_stop(
        self,
        entry_price: float,
        current_price: float,
        current_stop_loss: float,
        profile: ProfileArg = None,
    ) -> float:
        new_stop = sizing.calculate_trailing_stop(entry_price, current_price, current_stop_loss, self._profile(profile))
        if new_stop != current_stop_loss:
            logger.debug("Trailing stop updated: $%.2f -> $%.2f", current_stop_loss, new_stop)
        return new_stop

    def should_take_partial_profits(
        self,
        entry_price: float,
        current_price: float,
        profile: ProfileArg = None,
    ) -> Tuple[bool, Optional[float]]:
        return sizing.should_take_partial_profits(entry_price, current_price, self._profile(profile))

    def evaluate_entry(
        self,
        symbol: str,
        current_price: float,
        portfolio_value: float,
        cash_available: float,
        open_positions: int,
        quantity: Optional[int] = None,
        profile: ProfileArg = None,
    ) -> EntryDecision:
        """
        Buy-side checks before an order: size, position ceiling, risk/reward,
        then cash. `quantity` overrides the recommended size.
        """
        calc = self.calculate_position_size(symbol, current_price, portfolio_value, cash_available, profile)
        qty = calc.recommended_quantity if quantity is None else quantity

        if qty < 1:
            return EntryDecision(
                allowed=False, reason="Insufficient funds for minimum position size",
                code="INSUFFICIENT_FUNDS", calculation=calc,
            )

        allowed, reason = self.can_open_position(open_positions, profile)
        if not allowed:
            return EntryDecision(
                allowed=False, quantity=qty, reason=reason or "Max positions reached",
                code="MAX_POSITIONS_REACHED", calculation=calc,
            )

        meets, rr_reason = self.meets_risk_reward_requirements(calc.risk_reward_ratio, profile)
        if not meets:
            return EntryDecision(
                allowed=False, quantity=qty, reason=rr_reason or "R:R too low",
                code="RISK_REWARD_TOO_LOW", calculation=calc,
            )

        total_cost = qty * current_price
        if total_cost > cash_available:
            return EntryDecision(
                allowed=False, quantity=qty,
                reason=f"Need ${total_cost:.2f}, available ${cash_available:.2f}",
                code="INSUFFICIENT_CASH", calculation=calc,
            )

        return EntryDecision(allowed=True, quantity=qty, calculation=calc)
