"""Exception types. Numeric edge cases never raise; these are for the rest."""


class EquityBotError(Exception):
    """Base class for equity_bot errors."""


class UnknownRiskProfileError(EquityBotError, KeyError):
    """Risk profile name or value outside the fixed catalog."""

    def __init__(self, profile: object):
        self.profile = profile
        super().__init__(f"Unknown risk profile: {profile!r}")

    def __str__(self) -> str:
        return self.args[0]


class MarketDataError(EquityBotError):
    """Quote or candle fetch failed at the transport level."""


class PersistenceError(EquityBotError):
    """Position could not be loaded or saved."""
