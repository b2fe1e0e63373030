# src/pqmeta/render/json_encoder.py
"""
MetadataJsonEncoder — JSON projection of footer metadata.

Key/value metadata is always replaced by an empty object. Writers store
arbitrary blobs there (often JSON-in-a-string with its own escaping, or raw
control characters), so it is left out rather than re-encoded. This is the
documented behaviour, not an error.

Layout:
  compact   → one object per line, then a blank line
  multiline → one indented object per model, each followed by a blank line
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, Iterable, List

from pqmeta.model.types import MetadataModel


def project(model: MetadataModel) -> MetadataModel:
    """Copy of ``model`` without key/value metadata."""
    return dataclasses.replace(model, key_value_metadata={})


class MetadataJsonEncoder:
    def __init__(self, indent: int = 2):
        self.indent = indent

    def to_payload(self, model: MetadataModel) -> Dict[str, Any]:
        return project(model).to_dict()

    def encode_one(self, model: MetadataModel, multiline: bool = False) -> str:
        payload = self.to_payload(model)
        if multiline:
            return json.dumps(payload, indent=self.indent, ensure_ascii=False)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    def encode(self, models: Iterable[MetadataModel], multiline: bool = False) -> str:
        docs: List[str] = [self.encode_one(m, multiline) for m in models]
        if not docs:
            return "\n"
        joiner = "\n\n" if multiline else "\n"
        return joiner.join(docs) + "\n\n"
