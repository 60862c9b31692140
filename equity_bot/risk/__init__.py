"""Risk management: profile catalog, position sizing, trade gates."""

from equity_bot.risk.gate import can_open_position, meets_risk_reward_requirements
from equity_bot.risk.manager import EntryDecision, RiskManager, profile_from_setting
from equity_bot.risk.profiles import RISK_PROFILES, RiskProfile, RiskProfileConfig, get_config, parse_risk_profile
from equity_bot.risk.sizing import (
    RiskCalculation,
    calculate_position_size,
    calculate_trailing_stop,
    should_take_partial_profits,
)

__all__ = [
    "RISK_PROFILES",
    "EntryDecision",
    "RiskCalculation",
    "RiskManager",
    "RiskProfile",
    "RiskProfileConfig",
    "calculate_position_size",
    "calculate_trailing_stop",
    "can_open_position",
    "get_config",
    "meets_risk_reward_requirements",
    "parse_risk_profile",
    "profile_from_setting",
    "should_take_partial_profits",
]
