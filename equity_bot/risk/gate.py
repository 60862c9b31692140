"""Trade gates: open-position ceiling and minimum risk/reward."""

from __future__ import annotations
from typing import Optional, Tuple, Union

from equity_bot.risk.profiles import RiskProfile, get_config, parse_risk_profile

RISK_REWARD_EPSILON = 0.01


def can_open_position(current_open_positions: int, profile: Union[str, RiskProfile]) -> Tuple[bool, Optional[str]]:
    profile = parse_risk_profile(profile)
    config = get_config(profile)
    if current_open_positions >= config.max_open_positions:
        return False, (
            f"Maximum open positions ({config.max_open_positions}) reached for {profile.value} risk profile"
        )
    return True, None


def meets_risk_reward_requirements(ratio: float, profile: Union[str, RiskProfile]) -> Tuple[bool, Optional[str]]:
    """Ratio must reach the profile minimum, with RISK_REWARD_EPSILON slack for rounding."""
    config = get_config(profile)
    if not ratio >= config.min_risk_reward - RISK_REWARD_EPSILON:
        return False, f"Risk/reward ratio {ratio:.2f}:1 is below minimum {config.min_risk_reward}:1"
    return True, None
