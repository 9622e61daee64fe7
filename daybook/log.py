"""Logging setup for Daybook entry points.

Usage:
    from daybook.log import setup_logging
    setup_logging(settings.log_level)   # once, at startup
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(levelname)-8s %(name)s — %(message)s"


def _parse_level(raw: str | int) -> int:
    if isinstance(raw, int):
        return raw
    level = logging.getLevelName(str(raw).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str | int = "INFO") -> None:
    """Configure the root logger. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(_parse_level(level))

    # Uvicorn and pytest install their own handlers; only add ours when none exist.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    logging.getLogger("daybook").setLevel(_parse_level(level))
