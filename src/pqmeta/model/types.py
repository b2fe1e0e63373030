# src/pqmeta/model/types.py
"""
In-memory footer metadata.

These objects are built once by a reader and are never mutated afterwards.
Sequences are tuples; ``key_value_metadata`` is a plain mapping that
renderers only read.

``to_dict`` produces the JSON projection (camelCase keys, JSON-safe values).
It carries key/value metadata as-is; dropping it is the encoder's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class Repetition(str, Enum):
    """Repetition class of a schema field."""

    REQUIRED = "REQUIRED"
    OPTIONAL = "OPTIONAL"
    REPEATED = "REPEATED"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, value: str) -> "Repetition":
        return cls(value.strip().upper())


def json_value(v: Any) -> Any:
    """Coerce a statistics value into something ``json.dumps`` accepts."""
    if v is None or isinstance(v, (bool, int, str)):
        return v
    if isinstance(v, float):
        # NaN/inf are not valid JSON
        return v if math.isfinite(v) else str(v)
    if isinstance(v, (bytes, bytearray)):
        try:
            return bytes(v).decode("utf-8")
        except UnicodeDecodeError:
            return "0x" + bytes(v).hex()
    if isinstance(v, (date, datetime, time)):
        return v.isoformat()
    if isinstance(v, Decimal):
        return str(v)
    return str(v)


@dataclass(frozen=True)
class SchemaField:
    """
    One node of the schema tree.

    Primitive fields have ``physical_type`` set and no children; groups have
    ``physical_type=None``. ``logical_type`` is the current annotation
    vocabulary, ``original_type`` the legacy (converted type) one.
    """

    name: str
    repetition: Repetition = Repetition.REQUIRED
    physical_type: Optional[str] = None
    type_length: Optional[int] = None
    logical_type: Optional[str] = None
    original_type: Optional[str] = None
    children: Tuple["SchemaField", ...] = ()
    # column-descriptor levels of a primitive, when read from a file
    max_repetition_level: Optional[int] = None
    max_definition_level: Optional[int] = None

    @property
    def is_group(self) -> bool:
        return self.physical_type is None

    def leaves(self, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], "SchemaField"]]:
        """Yield ``(path, field)`` for every primitive below this node, in schema order."""
        for child in self.children:
            path = prefix + (child.name,)
            if child.is_group:
                yield from child.leaves(path)
            else:
                yield path, child

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "repetition": self.repetition.value,
        }
        if self.is_group:
            d["fields"] = [c.to_dict() for c in self.children]
        else:
            d["primitiveType"] = self.physical_type
            if self.type_length is not None:
                d["typeLength"] = self.type_length
        d["logicalType"] = self.logical_type
        d["originalType"] = self.original_type
        return d


@dataclass(frozen=True)
class Statistics:
    """Column-chunk statistics. Every part is optional."""

    min: Any = None
    max: Any = None
    null_count: Optional[int] = None
    distinct_count: Optional[int] = None
    has_min_max: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.has_min_max and self.null_count is None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.has_min_max:
            d["min"] = json_value(self.min)
            d["max"] = json_value(self.max)
        d["nullCount"] = self.null_count
        if self.distinct_count is not None:
            d["distinctCount"] = self.distinct_count
        return d


@dataclass(frozen=True)
class ColumnChunk:
    """Storage of one leaf column within one block."""

    path: str
    codec: str
    encodings: Tuple[str, ...] = ()
    value_count: int = 0
    total_size: int = 0
    total_uncompressed_size: int = 0
    physical_type: Optional[str] = None
    first_data_page: Optional[int] = None
    dictionary_page_offset: Optional[int] = None
    statistics: Optional[Statistics] = None

    @property
    def sorted_encodings(self) -> List[str]:
        """Encodings deduplicated and sorted."""
        return sorted(set(self.encodings))

    @property
    def compression_ratio(self) -> Optional[float]:
        if not self.total_size:
            return None
        return self.total_uncompressed_size / self.total_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "primitiveType": self.physical_type,
            "codec": self.codec,
            "encodings": self.sorted_encodings,
            "valueCount": self.value_count,
            "totalSize": self.total_size,
            "totalUncompressedSize": self.total_uncompressed_size,
            "firstDataPage": self.first_data_page,
            "dictionaryPageOffset": self.dictionary_page_offset,
            "statistics": self.statistics.to_dict() if self.statistics is not None else None,
        }


@dataclass(frozen=True)
class Block:
    """A row group."""

    row_count: int
    total_byte_size: int
    columns: Tuple[ColumnChunk, ...] = ()
    starting_pos: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "totalByteSize": self.total_byte_size,
            "startingPos": self.starting_pos,
            "columns": [c.to_dict() for c in self.columns],
        }


@dataclass(frozen=True)
class MetadataModel:
    """The fully resolved footer of one Parquet file."""

    schema: SchemaField
    blocks: Tuple[Block, ...] = ()
    key_value_metadata: Mapping[str, str] = field(default_factory=dict)
    created_by: str = ""

    @property
    def row_count(self) -> int:
        return sum(b.row_count for b in self.blocks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileMetaData": {
                "schema": self.schema.to_dict(),
                "keyValueMetaData": dict(self.key_value_metadata),
                "createdBy": self.created_by or None,
            },
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass(frozen=True)
class Footer:
    """A footer together with the physical file it was read from."""

    file: str
    metadata: MetadataModel
