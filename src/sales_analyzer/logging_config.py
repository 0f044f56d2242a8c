"""Logging setup for the API process."""

from __future__ import annotations

import logging

from sales_analyzer.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Install a stream handler on the package logger.

    Safe to call more than once; only the level is updated on later calls.
    """
    global _configured

    level_name = (level or get_settings().log_level).upper()
    package_logger = logging.getLogger("sales_analyzer")
    package_logger.setLevel(getattr(logging, level_name, logging.INFO))

    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    _configured = True
