# src/pqmeta/reader/footer.py
"""
Footer reader: resolves inputs and turns PyArrow's FileMetaData into
MetadataModel objects. Only footers are read, never row data.

Schema tree
-----------
PyArrow exposes leaf columns (ColumnSchema) but not the group structure, so
the tree is recovered from the schema printout (``str(md.schema)``), e.g.

    required group field_id=-1 schema {
      optional group field_id=-1 tags (List) {
        repeated group field_id=-1 list {
          optional binary field_id=-1 element (String);
        }
      }
    }

Leaf details (physical/logical/converted type) are then taken from
ColumnSchema. If the printout cannot be matched against the leaf columns,
a flat tree is built from leaf paths and levels instead.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

import pyarrow as pa
import pyarrow.fs as pafs
import pyarrow.parquet as pq

from pqmeta.connectors.filesystem import build_filesystem, list_files, to_fs_path
from pqmeta.connectors.handle import SourceHandle
from pqmeta.errors import ResolutionError
from pqmeta.logging import get_logger, log_exception
from pqmeta.model.types import (
    Block,
    ColumnChunk,
    Footer,
    MetadataModel,
    Repetition,
    SchemaField,
    Statistics,
)

_logger = get_logger(__name__)

_NODE_LINE = re.compile(
    r"^\s*(?P<rep>required|optional|repeated)\s+"
    r"(?P<kind>group|[\w()]+)\s+"
    r"(?:field_id=-?\d+\s+)?"
    r"(?P<name>.+?)"
    r"(?:\s+\((?P<annotation>[^()]*(?:\([^()]*\))?[^()]*)\))?"
    r"\s*(?P<end>[{;])\s*$"
)
_CLOSE_LINE = re.compile(r"^\s*}\s*$")
_FIXED = re.compile(r"^fixed_len_byte_array\((\d+)\)$")

_PRINTED_PHYSICAL = {
    "binary": "BYTE_ARRAY",
    "boolean": "BOOLEAN",
}

_GROUP_ORIGINAL = {
    "List": "LIST",
    "Map": "MAP",
}


class MetadataProvider(Protocol):
    """Anything that can turn an input into footers, in storage order."""

    def read_footers(self, handle: SourceHandle) -> List[Footer]:
        ...


# ---------- schema ----------

class _Node:
    __slots__ = ("name", "raw_name", "repetition", "physical", "length", "annotation", "children")

    def __init__(self, name, repetition, physical=None, length=None, annotation=None, raw_name=None):
        self.name = name
        # full "name (text)" when a trailing parenthesis was read as annotation
        self.raw_name = raw_name or name
        self.repetition = repetition
        self.physical = physical
        self.length = length
        self.annotation = annotation
        self.children: List["_Node"] = []


def parse_schema_text(text: str) -> Optional[_Node]:
    """
    Parse a Parquet schema printout into a node tree.

    Lines that are neither node nor closing-brace lines (the object repr on
    top, blank lines) are ignored. Returns None when no root group is found
    or braces do not balance.

    A trailing ``(text)`` is read as an annotation; ``raw_name`` keeps the
    alternative reading where it is part of the name.
    """
    root: Optional[_Node] = None
    stack: List[_Node] = []
    for line in text.splitlines():
        if _CLOSE_LINE.match(line):
            if not stack:
                return None
            stack.pop()
            continue
        m = _NODE_LINE.match(line)
        if not m:
            continue

        kind = m.group("kind")
        annotation = m.group("annotation")
        raw_name = line[m.start("name"):m.end("annotation") + 1] if annotation is not None else None
        node = _Node(
            name=m.group("name"),
            repetition=Repetition.from_str(m.group("rep")),
            annotation=annotation,
            raw_name=raw_name,
        )
        if kind != "group":
            fixed = _FIXED.match(kind)
            if fixed:
                node.physical = "FIXED_LEN_BYTE_ARRAY"
                node.length = int(fixed.group(1))
            else:
                node.physical = _PRINTED_PHYSICAL.get(kind, kind.upper())

        if stack:
            stack[-1].children.append(node)
        elif root is None:
            root = node
        else:
            return None  # a second top-level node
        if m.group("end") == "{":
            stack.append(node)

    if root is None or stack:
        return None
    return root


def _logical_name(logical_type: Any) -> Optional[str]:
    if logical_type is None:
        return None
    kind = getattr(logical_type, "type", None)
    if kind is None or str(kind).upper() == "NONE":
        return None
    text = str(logical_type)
    return text or None


def _converted_name(converted_type: Any) -> Optional[str]:
    if converted_type is None:
        return None
    text = str(converted_type)
    return None if text.upper() == "NONE" else text


def _leaf_columns(md) -> List[Any]:
    return [md.schema.column(i) for i in range(md.num_columns)]


def _choose_names(node: _Node, paths: List[str], prefix: Tuple[str, ...] = ()) -> None:
    """
    Settle ``name (text)`` lines that are either a name plus an annotation or
    a name that itself ends in parentheses. The reading whose path matches
    the next leaf column wins; ``paths`` is consumed in schema order.
    """
    for child in node.children:
        if child.raw_name != child.name and paths:
            plain = ".".join(prefix + (child.name,))
            whole = ".".join(prefix + (child.raw_name,))
            nxt = paths[0]
            if child.physical is None:
                use_whole = not nxt.startswith(plain + ".") and nxt.startswith(whole + ".")
            else:
                use_whole = nxt != plain and nxt == whole
            if use_whole:
                child.name, child.annotation = child.raw_name, None
        if child.physical is None:
            _choose_names(child, paths, prefix + (child.name,))
        elif paths:
            paths.pop(0)


def _to_field(node: _Node, leaves: Iterator[Any]) -> SchemaField:
    """Convert a parsed node; ``leaves`` is consumed in schema order."""
    if node.physical is None:
        children = tuple(_to_field(c, leaves) for c in node.children)
        return SchemaField(
            name=node.name,
            repetition=node.repetition,
            logical_type=node.annotation,
            original_type=_GROUP_ORIGINAL.get(node.annotation or ""),
            children=children,
        )

    col = next(leaves, None)
    physical = getattr(col, "physical_type", None) or node.physical
    length = node.length
    if physical == "FIXED_LEN_BYTE_ARRAY":
        length = getattr(col, "length", None) or length
    return SchemaField(
        name=node.name,
        repetition=node.repetition,
        physical_type=physical,
        type_length=length if physical == "FIXED_LEN_BYTE_ARRAY" else None,
        logical_type=_logical_name(getattr(col, "logical_type", None)) or node.annotation,
        original_type=_converted_name(getattr(col, "converted_type", None)),
        max_repetition_level=getattr(col, "max_repetition_level", None),
        max_definition_level=getattr(col, "max_definition_level", None),
    )


def _flat_schema(leaves: List[Any]) -> SchemaField:
    """
    Leaf-only tree used when the printout cannot be matched.

    Names are full dotted paths and levels come straight from the column
    descriptors. Repetition is exact for top-level columns only; group nodes
    are not recoverable.
    """
    fields = []
    for col in leaves:
        max_rep = getattr(col, "max_repetition_level", 0)
        max_def = getattr(col, "max_definition_level", 0)
        if max_rep > 0:
            rep = Repetition.REPEATED
        elif max_def > 0:
            rep = Repetition.OPTIONAL
        else:
            rep = Repetition.REQUIRED
        physical = col.physical_type
        fields.append(
            SchemaField(
                name=str(col.path),
                repetition=rep,
                physical_type=physical,
                type_length=getattr(col, "length", None) if physical == "FIXED_LEN_BYTE_ARRAY" else None,
                logical_type=_logical_name(getattr(col, "logical_type", None)),
                original_type=_converted_name(getattr(col, "converted_type", None)),
                max_repetition_level=max_rep,
                max_definition_level=max_def,
            )
        )
    return SchemaField(name="schema", children=tuple(fields))


def schema_from_arrow(md) -> SchemaField:
    leaves = _leaf_columns(md)
    paths = [str(c.path) for c in leaves]
    root = parse_schema_text(str(md.schema))
    if root is not None:
        _choose_names(root, list(paths))
        schema = _to_field(root, iter(leaves))
        if [".".join(p) for p, _ in schema.leaves()] == paths:
            return schema
    _logger.warning("could not recover the schema tree; showing leaf columns only")
    return _flat_schema(leaves)


# ---------- row groups ----------

def _statistics(col) -> Optional[Statistics]:
    if not getattr(col, "is_stats_set", True):
        return None
    stats = col.statistics
    if stats is None:
        return None

    has_min_max = bool(getattr(stats, "has_min_max", False))
    mn = mx = None
    if has_min_max:
        try:
            mn, mx = stats.min, stats.max
        except (ValueError, TypeError, NotImplementedError, pa.ArrowException) as e:
            # some logical types have no Python conversion; fall back to raw bytes
            log_exception(_logger, f"cannot convert min/max for {col.path_in_schema}", e)
            mn = getattr(stats, "min_raw", None)
            mx = getattr(stats, "max_raw", None)
            has_min_max = mn is not None and mx is not None

    null_count = stats.null_count if getattr(stats, "has_null_count", True) else None
    distinct = stats.distinct_count if getattr(stats, "has_distinct_count", False) else None
    return Statistics(
        min=mn,
        max=mx,
        null_count=null_count,
        distinct_count=distinct,
        has_min_max=has_min_max,
    )


def _column_chunk(col) -> ColumnChunk:
    has_dict = bool(getattr(col, "has_dictionary_page", False))
    return ColumnChunk(
        path=str(col.path_in_schema),
        codec=str(col.compression),
        encodings=tuple(str(e) for e in col.encodings),
        value_count=col.num_values,
        total_size=col.total_compressed_size,
        total_uncompressed_size=col.total_uncompressed_size,
        physical_type=col.physical_type,
        first_data_page=col.data_page_offset,
        dictionary_page_offset=col.dictionary_page_offset if has_dict else None,
        statistics=_statistics(col),
    )


def blocks_from_arrow(md) -> Tuple[Block, ...]:
    blocks = []
    for i in range(md.num_row_groups):
        rg = md.row_group(i)
        columns = tuple(_column_chunk(rg.column(j)) for j in range(rg.num_columns))
        starting_pos = None
        if columns:
            first = columns[0]
            starting_pos = (
                first.dictionary_page_offset
                if first.dictionary_page_offset is not None
                else first.first_data_page
            )
        blocks.append(
            Block(
                row_count=rg.num_rows,
                total_byte_size=rg.total_byte_size,
                columns=columns,
                starting_pos=starting_pos,
            )
        )
    return tuple(blocks)


def _key_value(md) -> Dict[str, str]:
    raw = md.metadata or {}
    out: Dict[str, str] = {}
    for k, v in raw.items():
        key = k.decode("utf-8", errors="replace") if isinstance(k, bytes) else str(k)
        val = v.decode("utf-8", errors="replace") if isinstance(v, bytes) else str(v)
        out[key] = val
    return out


def model_from_arrow(md) -> MetadataModel:
    """Build a MetadataModel from a ``pyarrow.parquet.FileMetaData``."""
    return MetadataModel(
        schema=schema_from_arrow(md),
        blocks=blocks_from_arrow(md),
        key_value_metadata=_key_value(md),
        created_by=md.created_by or "",
    )


# ---------- provider ----------

class ParquetFooterReader:
    """MetadataProvider backed by PyArrow; local paths and S3."""

    def __init__(self, filesystem: Optional[pafs.FileSystem] = None):
        self._filesystem = filesystem

    def read_footers(self, handle: SourceHandle) -> List[Footer]:
        fs = self._filesystem or build_filesystem(handle)
        files = list_files(handle, fs)
        return [self.read_file(handle, location, fs) for location in files]

    def read_file(self, handle: SourceHandle, location: str, fs: pafs.FileSystem) -> Footer:
        _logger.debug("reading footer of %s", location)
        try:
            md = pq.read_metadata(to_fs_path(handle, location), filesystem=fs)
        except (OSError, pa.ArrowException) as e:
            log_exception(_logger, f"failed to read footer of {location}", e)
            raise ResolutionError(location, f"not a readable Parquet file ({e})", e) from e
        return Footer(file=location, metadata=model_from_arrow(md))


def read_metadata(path: str) -> List[Footer]:
    """Footers for one input (file, directory, glob or s3:// URI)."""
    return ParquetFooterReader().read_footers(SourceHandle.from_uri(path))
