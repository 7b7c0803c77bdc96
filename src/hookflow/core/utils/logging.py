"""Logging helpers for hookflow components.

Purpose:
    Provide a centralised helper for configuring module-level loggers with a
    consistent formatter and level so hosts embedding the dispatch engine get
    readable output without extra boilerplate.
External Dependencies:
    Uses only the Python standard library `logging` module.
Fallback Semantics:
    Unknown level names fall back to ``logging.INFO``.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """Summary: Return a logger configured with a standard formatter.
    Parameters:
        name: Name of the logger to retrieve.
        level: Optional logging level override, either numeric or a level name
            such as ``"DEBUG"``. Defaults to ``logging.INFO``.
    Returns:
        logging.Logger: Configured logger instance.
    Side Effects:
        Adds a ``StreamHandler`` with a standard formatter when the logger does
        not already have handlers attached.
    """

    logger = logging.getLogger(name)
    if isinstance(level, str):
        effective_level = logging.getLevelName(level.upper())
        if not isinstance(effective_level, int):
            effective_level = logging.INFO
    else:
        effective_level = level if level is not None else logging.INFO

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(effective_level)

    return logger


__all__ = ["LOG_FORMAT", "configure_logger"]
