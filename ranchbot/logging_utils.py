"""ranchbot.logging_utils

Centralised logging configuration for RanchBot.

Design goals:
- Single, uniform console format across the bot and the payout workflow
- UTC timestamps (to avoid confusion across hosts/timezones)
- Optional ranch context without forcing every callsite to supply it
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional


class _DefaultFieldsFilter(logging.Filter):
    """Ensure optional fields exist so formatters never KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:
        # A short identifier like: "Sunny Acres" or "-"
        if not hasattr(record, "ranch"):
            record.ranch = "-"
        return True


def setup_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Args:
        level: Logging level name (e.g. 'INFO', 'DEBUG'). If omitted, uses
               RANCHBOT_LOG_LEVEL env var, falling back to 'INFO'.
    """
    level_name = (level or os.getenv("RANCHBOT_LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if getattr(root, "_ranchbot_configured", False):
        # Idempotent: safe if called multiple times.
        return

    root.setLevel(numeric_level)

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-5s | %(name)s | %(ranch)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Force UTC timestamps.
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    handler.addFilter(_DefaultFieldsFilter())

    root.addHandler(handler)
    root._ranchbot_configured = True  # type: ignore[attr-defined]

    # Reduce third-party noise. We keep warnings/errors, but suppress INFO spam.
    logging.getLogger("discord").setLevel(logging.WARNING)
    logging.getLogger("discord.http").setLevel(logging.WARNING)
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)


class RanchLoggerAdapter(logging.LoggerAdapter):
    """Prefix lines with the ranch name and fill the 'ranch' formatter field."""

    def __init__(self, logger: logging.Logger, ranch_name: str | None):
        super().__init__(logger, {"ranch": ranch_name or "-"})

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.extra['ranch']}] {msg}", kwargs

    @classmethod
    def for_ranch(cls, logger_name: str, ranch_name: str | None) -> "RanchLoggerAdapter":
        return cls(logging.getLogger(logger_name), ranch_name)


def new_error_id() -> str:
    """Short correlation id for error lines (useful when users paste logs)."""
    return uuid.uuid4().hex[:6].upper()
