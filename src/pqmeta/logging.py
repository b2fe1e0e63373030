# src/pqmeta/logging.py
"""
Logging helpers.

Everything logs under the ``pqmeta`` namespace. Logs go to stderr and never
to the rendering output stream, so table/JSON output stays clean.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

_ROOT = "pqmeta"
_HANDLER_ATTR = "_pqmeta_handler"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``pqmeta`` namespace."""
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(verbose: bool = False, level: Optional[str] = None) -> None:
    """
    Attach a single stderr handler to the package logger.

    Level resolution: explicit ``level`` > ``PQMETA_LOG_LEVEL`` > DEBUG when
    verbose, else WARNING. Safe to call more than once.
    """
    root = logging.getLogger(_ROOT)
    chosen = level or os.getenv("PQMETA_LOG_LEVEL") or ("DEBUG" if verbose else "WARNING")
    root.setLevel(chosen.upper())

    if not any(getattr(h, _HANDLER_ATTR, False) for h in root.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        setattr(handler, _HANDLER_ATTR, True)
        root.addHandler(handler)


def log_exception(logger: logging.Logger, msg: str, exc: BaseException) -> None:
    """Log an exception at debug level, with traceback."""
    logger.debug("%s: %s", msg, exc, exc_info=exc)
