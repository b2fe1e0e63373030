# src/pqmeta/config/settings.py
"""
Effective configuration.

Precedence (lowest → highest):
  1. defaults on InspectConfig
  2. environment variables (PQMETA_*)
  3. CLI overrides (a value of None means "not given")
"""

from __future__ import annotations

import os
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from pqmeta.errors import ConfigError
from pqmeta.render.printer import WhitespaceHandler
from pqmeta.render.walker import TypeNames

ENV_VARS = {
    "output": "PQMETA_OUTPUT",
    "multiline": "PQMETA_MULTILINE",
    "type_names": "PQMETA_ORIGINAL_TYPES",
    "column_padding": "PQMETA_COLUMN_PADDING",
    "whitespace": "PQMETA_WHITESPACE",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class InspectConfig(BaseModel):
    """Options for one inspection run."""

    output: Literal["table", "json"] = Field("table", description="Output mode.")
    multiline: bool = Field(False, description="Indented JSON (json output only).")
    type_names: TypeNames = Field(TypeNames.CURRENT, description="Schema annotation vocabulary.")
    column_padding: int = Field(1, ge=0, description="Spaces between table columns.")
    whitespace: WhitespaceHandler = Field(
        WhitespaceHandler.COLLAPSE_WHITESPACE,
        description="How whitespace inside table cells is normalized.",
    )

    @property
    def json_mode(self) -> bool:
        return self.output == "json"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    raw = environ.get(ENV_VARS["output"])
    if raw:
        values["output"] = raw.strip().lower()

    raw = environ.get(ENV_VARS["multiline"])
    if raw is not None:
        values["multiline"] = _parse_bool(ENV_VARS["multiline"], raw)

    raw = environ.get(ENV_VARS["type_names"])
    if raw is not None:
        values["type_names"] = TypeNames.from_flag(_parse_bool(ENV_VARS["type_names"], raw))

    raw = environ.get(ENV_VARS["column_padding"])
    if raw:
        try:
            values["column_padding"] = int(raw)
        except ValueError:
            raise ConfigError(f"{ENV_VARS['column_padding']} must be an integer, got {raw!r}")

    raw = environ.get(ENV_VARS["whitespace"])
    if raw:
        values["whitespace"] = raw.strip().lower()

    return values


def resolve_effective_config(
    cli_overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InspectConfig:
    """Merge defaults, environment and CLI overrides into an InspectConfig."""
    values = _from_env(os.environ if environ is None else environ)
    for key, value in (cli_overrides or {}).items():
        if value is not None:
            values[key] = value
    try:
        return InspectConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
