"""
Logging for POS Retail.

Usage:
    from pos_retail.logging import get_logger, get_session_logger

    logger = get_logger(__name__)
    logger.error("Backend POST /api/transactions failed")

    till_log = get_session_logger(__name__, "till-1")
    till_log.info("added P1 x2")   # -> "[till-1] added P1 x2"

Settings:
    LOG_LEVEL   level name, defaults to INFO
    POS_ENV     "production" drops timestamps (the collector adds its own)
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_PRODUCTION = "%(levelname)s - %(name)s - %(message)s"

# Noisy transport loggers behind the backend client and the Upstash REST client
QUIET_LOGGERS = ("httpx", "httpcore", "upstash_redis")

SESSION_ID_MAX_LENGTH = 8


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    fmt = LOG_FORMAT_PRODUCTION if os.environ.get("POS_ENV") == "production" else LOG_FORMAT

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Make a till session or line id safe for a log line.

    Control characters are escaped so a crafted X-POS-Session header cannot
    forge log entries, and the id is cut to SESSION_ID_MAX_LENGTH chars.
    """
    if not id_value:
        return "N/A"
    safe_value = (
        str(id_value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    return safe_value[:SESSION_ID_MAX_LENGTH]


class SessionLogger(logging.LoggerAdapter):
    """Prefixes every message with the sanitized till session id."""

    def process(self, msg, kwargs):
        return f"[{self.extra['session']}] {msg}", kwargs


def get_session_logger(name: str, session_id: str | None) -> SessionLogger:
    """Logger bound to one till session."""
    return SessionLogger(get_logger(name), {"session": sanitize_id_for_logging(session_id)})


__all__ = [
    "get_logger",
    "get_session_logger",
    "sanitize_id_for_logging",
    "SessionLogger",
]
