"""Logging for the portfolio chat service.

Serverless runtimes collect stdout/stderr, so the console is the default sink.
LOG_PATH switches to a size-rotated file for long-running hosts.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import colorlog

LOGGER_NAME = "portfolio_chat"

LOG_FILE_MAX_BYTES = 1_048_576
LOG_FILE_BACKUPS = 3

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_COLOR_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(name)s - %(message)s"
_LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def setup_logging(log_path: str | None = None) -> logging.Logger:
    """
    (Re)configure the ``portfolio_chat`` logger from LOG_LEVEL and LOG_COLOR.

    Calling it again replaces the previous handler, so tests and reloads
    never stack duplicates. LOG_LEVEL=DISABLE silences everything.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = False

    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if level_name == "DISABLE":
        logging.disable(logging.CRITICAL)
        logger.addHandler(logging.NullHandler())
        return logger

    logging.disable(logging.NOTSET)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    handler, open_error = _open_handler(log_path)
    handler.setFormatter(_formatter(colored=_color_enabled() and not log_path))
    logger.addHandler(handler)

    if open_error is not None:
        logger.warning("Cannot write chat log to %r (%s); logging to console instead", log_path, open_error)
    return logger


def _open_handler(log_path: str | None) -> tuple[logging.Handler, OSError | None]:
    if not log_path:
        return logging.StreamHandler(), None
    try:
        handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
    except OSError as e:
        return logging.StreamHandler(), e
    return handler, None


def _color_enabled() -> bool:
    return os.getenv("LOG_COLOR", "true").strip().lower() in ("true", "1", "yes")


def _formatter(colored: bool) -> logging.Formatter:
    """Colored console output; plain text for files and LOG_COLOR=false."""
    if colored:
        return colorlog.ColoredFormatter(_COLOR_FORMAT, reset=True, log_colors=_LEVEL_COLORS)
    return logging.Formatter(_PLAIN_FORMAT)


def mask_secret(secret: str, keep_start: int = 6, keep_end: int = 4) -> str:
    """Show only the edges of an API key, e.g. ``gsk_12...cdef``."""
    secret = (secret or "").strip()
    if len(secret) <= keep_start + keep_end:
        return "*" * len(secret)
    return f"{secret[:keep_start]}...{secret[-keep_end:]}"
