# src/pqmeta/errors.py
"""
Exception types.

- ResolutionError: an input cannot be turned into Parquet footers (missing
  path, not a Parquet file, unreachable storage, empty directory/glob).
- FormattingFault: the renderer was used against its contract. This is a
  defect in the caller, never a user-facing condition.
- ConfigError: invalid configuration value (env var or CLI override).
"""

from __future__ import annotations

from typing import Optional


class PqmetaError(Exception):
    """Base class for all pqmeta errors."""


class ResolutionError(PqmetaError):
    """An input could not be resolved to one or more footers."""

    def __init__(self, source: str, reason: str, cause: Optional[BaseException] = None):
        self.source = source
        self.reason = reason
        self.cause = cause
        super().__init__(f"Cannot read metadata for '{source}': {reason}")


class FormattingFault(PqmetaError):
    """A renderer contract violation."""


class ConfigError(PqmetaError):
    """Invalid configuration."""


def format_error_for_cli(exc: BaseException) -> str:
    """One-line, human-facing message for an exception."""
    if isinstance(exc, PqmetaError):
        return str(exc)
    if isinstance(exc, FileNotFoundError):
        name = exc.filename or str(exc)
        return f"File not found: {name}"
    text = str(exc).strip()
    if not text:
        return type(exc).__name__
    # pyarrow errors can span several lines; the first one carries the gist
    return f"{type(exc).__name__}: {text.splitlines()[0]}"
