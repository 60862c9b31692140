"""
Risk profile catalog. Fixed table; percentages are fractions (0.02 = 2%).
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from equity_bot.core.errors import UnknownRiskProfileError


class RiskProfile(str, Enum):
    CONSERVATIVE = "Conservative"
    MODERATE = "Moderate"
    AGGRESSIVE = "Aggressive"
    VERY_AGGRESSIVE = "VeryAggressive"


@dataclass(frozen=True)
class RiskProfileConfig:
    max_risk_per_trade: float
    max_position_percent: float
    max_open_positions: int
    stop_loss_percent: float
    min_risk_reward: float
    trailing_stop_percent: float
    partial_profit_levels: Tuple[float, ...]


RISK_PROFILES: Mapping[RiskProfile, RiskProfileConfig] = MappingProxyType({
    RiskProfile.CONSERVATIVE: RiskProfileConfig(
        max_risk_per_trade=0.01,
        max_position_percent=0.10,
        max_open_positions=3,
        stop_loss_percent=0.02,
        min_risk_reward=3.0,
        trailing_stop_percent=0.02,
        partial_profit_levels=(0.03, 0.06),
    ),
    RiskProfile.MODERATE: RiskProfileConfig(
        max_risk_per_trade=0.02,
        max_position_percent=0.15,
        max_open_positions=5,
        stop_loss_percent=0.03,
        min_risk_reward=2.0,
        trailing_stop_percent=0.03,
        partial_profit_levels=(0.04, 0.08),
    ),
    RiskProfile.AGGRESSIVE: RiskProfileConfig(
        max_risk_per_trade=0.05,
        max_position_percent=0.25,
        max_open_positions=7,
        stop_loss_percent=0.05,
        min_risk_reward=1.5,
        trailing_stop_percent=0.04,
        partial_profit_levels=(0.06, 0.12),
    ),
    RiskProfile.VERY_AGGRESSIVE: RiskProfileConfig(
        max_risk_per_trade=0.10,
        max_position_percent=0.40,
        max_open_positions=10,
        stop_loss_percent=0.08,
        min_risk_reward=1.0,
        trailing_stop_percent=0.06,
        partial_profit_levels=(0.10, 0.20),
    ),
})


def parse_risk_profile(value: Union[str, RiskProfile]) -> RiskProfile:
    """Case-insensitive name lookup ("moderate", "VeryAggressive", "very_aggressive")."""
    if isinstance(value, RiskProfile):
        return value
    key = str(value).strip().replace("_", "").replace(" ", "").lower()
    for profile in RiskProfile:
        if profile.value.lower() == key:
            return profile
    raise UnknownRiskProfileError(value)


def get_config(profile: Union[str, RiskProfile]) -> RiskProfileConfig:
    """Policy for a profile. Unknown profiles raise UnknownRiskProfileError."""
    try:
        return RISK_PROFILES[parse_risk_profile(profile)]
    except KeyError:
        raise UnknownRiskProfileError(profile) from None
