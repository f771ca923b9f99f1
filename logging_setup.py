"""
Logging configuration for SplitLedger

Only the CLI calls configure_logging. Library modules take a logger from
get_logger and never attach handlers themselves.
"""
from __future__ import annotations
import logging
import os
import sys
from typing import IO, Optional, Union

PKG_LOGGER_NAME = "split_ledger"
_CONFIGURED = False


def _level_from_name(value: str) -> Optional[int]:
    """Level for a name like "debug" or a number like "15"; None if unknown"""
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    numeric = getattr(logging, value, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: Union[int, str, None]) -> int:
    """Explicit level, else SPLIT_LEDGER_LOG_LEVEL, else INFO"""
    if isinstance(level, int):
        return level
    for candidate in (level, os.getenv("SPLIT_LEDGER_LOG_LEVEL")):
        if candidate:
            numeric = _level_from_name(candidate)
            if numeric is not None:
                return numeric
    return logging.INFO


def configure_logging(level: Union[int, str, None] = None, *, stream: IO[str] = sys.stderr) -> None:
    """Attach one StreamHandler to the package logger, once per process"""
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace"""
    pkg_logger = logging.getLogger(PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    if name != PKG_LOGGER_NAME and not name.startswith(PKG_LOGGER_NAME + "."):
        name = f"{PKG_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
