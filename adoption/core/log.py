"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Configure the root logger once; unknown level names fall back to WARNING."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
