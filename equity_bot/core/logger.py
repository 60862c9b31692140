"""
Logging for the CLI and the long-running monitor: console plus an
optional file, one format for both.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# chatter from the market-data client on every quote fetch
_NOISY_LOGGERS = ("urllib3", "requests", "yfinance", "peewee", "asyncio")


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the "equity_bot" logger and return it. Safe to call again;
    handlers are replaced, not stacked. Never log tokens or chat ids.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    package_logger = logging.getLogger("equity_bot")
    package_logger.setLevel(log_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    if log_dir and log_file:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return package_logger
