# src/pqmeta/render/printer.py
"""
ColumnTablePrinter — buffered, column-aligned text output.

Rows are recorded as ordered lists of cells and held until ``flush_columns``.
At flush time the printer computes, for every column *index*, the widest
cell any buffered row has at that index, then writes each row with its
cells left-justified to those widths. Rows of different shapes share one
width table: column 0 of a schema row and column 0 of a block row line up.

After a flush the buffer and the width table are empty again, so each
flush is an independent alignment scope (one per file, typically).

Usage
-----
    with ColumnTablePrinter(sys.stdout) as printer:
        printer.format("file: {}", path)
        printer.emit("id:", "REQUIRED", "INT32")
        printer.emit_row(Row("row group 1:").cell(f"RC:{n}"))
        printer.flush_columns()
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, TextIO

from pqmeta.errors import FormattingFault

_WHITESPACE_RUN = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class WhitespaceHandler(str, Enum):
    """How embedded whitespace in a cell is treated before measuring it."""

    NONE = "none"  # cells are written verbatim except for escaped line breaks
    ELIMINATE_NEWLINES = "eliminate_newlines"  # each line break becomes one space
    COLLAPSE_WHITESPACE = "collapse_whitespace"  # any whitespace run becomes one space

    def __str__(self) -> str:
        return self.value

    def apply(self, text: str) -> str:
        if self is WhitespaceHandler.COLLAPSE_WHITESPACE:
            return _WHITESPACE_RUN.sub(" ", text)
        if self is WhitespaceHandler.ELIMINATE_NEWLINES:
            return _LINE_BREAK.sub(" ", text)
        return text.replace("\r", "\\r").replace("\n", "\\n")


def render_cell(value: Any) -> str:
    """Text of a single cell. ``None`` renders as an empty cell."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class Row:
    """
    An ordered list of cells.

    Built up with ``cell``/``cells``; every value is converted to text when
    added, so a row never holds unresolved placeholders.
    """

    __slots__ = ("_cells",)

    def __init__(self, *values: Any):
        self._cells: List[str] = [render_cell(v) for v in values]

    def cell(self, value: Any) -> "Row":
        self._cells.append(render_cell(value))
        return self

    def cells(self, *values: Any) -> "Row":
        for v in values:
            self.cell(v)
        return self

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self):
        return iter(self._cells)

    def __repr__(self) -> str:
        return f"Row({', '.join(repr(c) for c in self._cells)})"


class ColumnTablePrinter:
    """Column-aligned writer over a text stream. See module docstring."""

    def __init__(
        self,
        out: TextIO,
        column_padding: int = 1,
        whitespace: WhitespaceHandler = WhitespaceHandler.COLLAPSE_WHITESPACE,
    ):
        if column_padding < 0:
            raise ValueError("column_padding must be >= 0")
        self._out = out
        self._separator = " " * column_padding
        self._whitespace = whitespace
        self._pending: List[List[str]] = []
        self._widths: List[int] = []
        self._closed = False

    # ------------------------------ context -------------------------------

    def __enter__(self) -> "ColumnTablePrinter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.flush_columns()
        finally:
            self._closed = True
            self._out.flush()

    # ------------------------------ state ---------------------------------

    @property
    def pending_rows(self) -> int:
        return len(self._pending)

    @property
    def column_widths(self) -> List[int]:
        """Widths of the current (unflushed) batch, one per column index."""
        return list(self._widths)

    # ------------------------------ output --------------------------------

    def emit(self, *values: Any) -> None:
        """Buffer one row made of ``values``. No values means a blank line."""
        self.emit_row(Row(*values))

    def emit_row(self, row: Row) -> None:
        """Buffer ``row``; its cells count towards this batch's column widths."""
        self._check_open()
        cells = [self._whitespace.apply(c) for c in row]
        for i, text in enumerate(cells):
            if i == len(self._widths):
                self._widths.append(len(text))
            elif len(text) > self._widths[i]:
                self._widths[i] = len(text)
        self._pending.append(cells)

    def format(self, template: str, *args: Any) -> None:
        """
        Write one fully resolved line right away, outside column alignment.

        ``template`` uses ``str.format`` placeholders; a trailing newline is
        added when missing. Rows still buffered are not written first.
        """
        self._check_open()
        try:
            line = template.format(*args)
        except (IndexError, KeyError, ValueError) as e:
            raise FormattingFault(
                f"Template {template!r} does not match {len(args)} argument(s): {e}"
            ) from e
        if not line.endswith("\n"):
            line += "\n"
        self._out.write(line)

    def flush_columns(self) -> None:
        """Write every buffered row padded to the batch's widths, then reset."""
        self._check_open()
        for cells in self._pending:
            self._out.write(self._layout(cells))
            self._out.write("\n")
        self._pending = []
        self._widths = []

    # ------------------------------ helpers -------------------------------

    def _layout(self, cells: List[str]) -> str:
        return self._separator.join(
            text.ljust(self._widths[i]) for i, text in enumerate(cells)
        )

    def _check_open(self) -> None:
        if self._closed:
            raise FormattingFault("Printer is closed")


__all__ = [
    "ColumnTablePrinter",
    "Row",
    "WhitespaceHandler",
    "render_cell",
]
