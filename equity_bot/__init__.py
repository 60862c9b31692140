"""Equity position engine: indicators, risk-profile sizing, and position monitoring."""

__version__ = "0.1.0"
