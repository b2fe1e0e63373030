# src/pqmeta/render/walker.py
"""
MetadataTableWalker — flattens a MetadataModel into printer rows.

Row order for one file:

    creator:     <created by>
    extra:       <key> = <value>          (one per key/value pair, by key)
    <blank>
    file schema: <root name>
    <field>:     <repetition> <type> <annotation> R:<r> D:<d>   (depth-first)
    <blank>
    row group 1: RC:<rows> TS:<bytes> OFFSET:<pos>
    <path>:      <type> <codec> SZ:<c>/<u>/<ratio> VC:<n> ENC:<...> ST:[...]
    <blank>
    row group 2: ...

The walker never flushes; the caller owns the alignment scope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pqmeta.model.types import Block, ColumnChunk, MetadataModel, Repetition, SchemaField, Statistics

from .printer import ColumnTablePrinter, Row

NO_STATS = "ST:[no stats]"


class TypeNames(str, Enum):
    """Which annotation vocabulary schema rows display."""

    LEGACY = "original"  # converted/original types: UTF8, DATE, DECIMAL ...
    CURRENT = "logical"  # logical types: String, Date, Decimal(precision=..) ...

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_flag(cls, show_original_types: bool) -> "TypeNames":
        return cls.LEGACY if show_original_types else cls.CURRENT


def _display_value(v: Any) -> str:
    if isinstance(v, (bytes, bytearray)):
        try:
            return bytes(v).decode("utf-8")
        except UnicodeDecodeError:
            return "0x" + bytes(v).hex()
    return str(v)


def format_statistics(stats: Optional[Statistics]) -> str:
    """``ST:[min .. max, nulls: n]``, degrading gracefully when parts are missing."""
    if stats is None or stats.is_empty:
        return NO_STATS
    parts = []
    if stats.has_min_max:
        parts.append(f"{_display_value(stats.min)} .. {_display_value(stats.max)}")
    if stats.null_count is not None:
        parts.append(f"nulls: {stats.null_count}")
    return "ST:[" + ", ".join(parts) + "]"


def format_annotation(field: SchemaField, type_names: TypeNames) -> str:
    if type_names is TypeNames.LEGACY:
        return f"O:{field.original_type}" if field.original_type else ""
    return f"L:{field.logical_type}" if field.logical_type else ""


def format_type(field: SchemaField) -> str:
    if field.is_group:
        return f"F:{len(field.children)}"
    if field.type_length:
        return f"{field.physical_type}({field.type_length})"
    return field.physical_type or ""


class MetadataTableWalker:
    """Emits schema, block and column-chunk rows for one model."""

    def __init__(self, type_names: TypeNames = TypeNames.CURRENT):
        self.type_names = type_names

    def render(
        self,
        printer: ColumnTablePrinter,
        model: MetadataModel,
        type_names: Optional[TypeNames] = None,
    ) -> None:
        names = type_names or self.type_names
        self._file_rows(printer, model)
        self._schema_rows(printer, model.schema, names)
        for ordinal, block in enumerate(model.blocks, start=1):
            self._block_rows(printer, ordinal, block)

    # ------------------------------ sections ------------------------------

    def _file_rows(self, printer: ColumnTablePrinter, model: MetadataModel) -> None:
        printer.emit("creator:", model.created_by)
        for key in sorted(model.key_value_metadata):
            printer.emit("extra:", f"{key} = {model.key_value_metadata[key]}")
        printer.emit()

    def _schema_rows(self, printer: ColumnTablePrinter, root: SchemaField, names: TypeNames) -> None:
        printer.emit("file schema:", root.name)
        for child in root.children:
            self._field_rows(printer, child, names, depth=0, rep=0, defn=0)
        printer.emit()

    def _field_rows(
        self,
        printer: ColumnTablePrinter,
        field: SchemaField,
        names: TypeNames,
        depth: int,
        rep: int,
        defn: int,
    ) -> None:
        if field.repetition is Repetition.REPEATED:
            rep += 1
            defn += 1
        elif field.repetition is Repetition.OPTIONAL:
            defn += 1
        if field.max_repetition_level is not None:
            rep = field.max_repetition_level
        if field.max_definition_level is not None:
            defn = field.max_definition_level

        printer.emit_row(
            Row("." * depth + field.name + ":").cells(
                field.repetition.value,
                format_type(field),
                format_annotation(field, names),
                f"R:{rep} D:{defn}",
            )
        )
        for child in field.children:
            self._field_rows(printer, child, names, depth + 1, rep, defn)

    def _block_rows(self, printer: ColumnTablePrinter, ordinal: int, block: Block) -> None:
        row = Row(f"row group {ordinal}:").cells(
            f"RC:{block.row_count}",
            f"TS:{block.total_byte_size}",
        )
        if block.starting_pos is not None:
            row.cell(f"OFFSET:{block.starting_pos}")
        printer.emit_row(row)

        for chunk in block.columns:
            printer.emit_row(self._chunk_row(chunk))
        printer.emit()

    def _chunk_row(self, chunk: ColumnChunk) -> Row:
        ratio = chunk.compression_ratio
        sizes = f"SZ:{chunk.total_size}/{chunk.total_uncompressed_size}"
        sizes += f"/{ratio:.2f}" if ratio is not None else "/-"
        return Row(chunk.path + ":").cells(
            chunk.physical_type or "",
            chunk.codec,
            sizes,
            f"VC:{chunk.value_count}",
            "ENC:" + ",".join(chunk.sorted_encodings),
            format_statistics(chunk.statistics),
        )
