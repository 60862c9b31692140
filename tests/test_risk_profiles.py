"""Unit tests for risk.profiles."""

import dataclasses

import pytest

from equity_bot.risk.profiles import RISK_PROFILES, RiskProfile, get_config, parse_risk_profile

ORDERED = [RiskProfile.CONSERVATIVE, RiskProfile.MODERATE, RiskProfile.AGGRESSIVE, RiskProfile.VERY_AGGRESSIVE]


def test_moderate_values():
    c = get_config(RiskProfile.MODERATE)
    assert c.max_risk_per_trade == 0.02
    assert c.max_position_percent == 0.15
    assert c.max_open_positions == 5
    assert c.stop_loss_percent == 0.03
    assert c.min_risk_reward == 2.0
    assert c.trailing_stop_percent == 0.03
    assert c.partial_profit_levels == (0.04, 0.08)


def test_thresholds_increase_with_aggressiveness():
    configs = [get_config(p) for p in ORDERED]
    for attr in ("max_risk_per_trade", "max_position_percent", "max_open_positions",
                 "stop_loss_percent", "trailing_stop_percent"):
        values = [getattr(c, attr) for c in configs]
        assert values == sorted(values), attr
    assert [c.min_risk_reward for c in configs] == [3.0, 2.0, 1.5, 1.0]
    assert [c.partial_profit_levels[0] for c in configs] == [0.03, 0.04, 0.06, 0.10]


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        RISK_PROFILES[RiskProfile.MODERATE] = get_config(RiskProfile.AGGRESSIVE)
    with pytest.raises(dataclasses.FrozenInstanceError):
        get_config(RiskProfile.MODERATE).stop_loss_percent = 0.5


@pytest.mark.parametrize("name,expected", [
    ("moderate", RiskProfile.MODERATE),
    ("VeryAggressive", RiskProfile.VERY_AGGRESSIVE),
    ("very_aggressive", RiskProfile.VERY_AGGRESSIVE),
    (" Conservative ", RiskProfile.CONSERVATIVE),
    (RiskProfile.AGGRESSIVE, RiskProfile.AGGRESSIVE),
])
def test_parse_risk_profile(name, expected):
    assert parse_risk_profile(name) is expected
