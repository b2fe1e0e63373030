# src/pqmeta/driver.py
"""
InspectionDriver — resolve inputs, then render them.

Flow
----
  1) Each input → SourceHandle → MetadataProvider → footers (in order)
  2) json:  encode every footer at once, write once
     table: per footer, walker rows are buffered, then header line + one flush

Resolution is done per input before anything of that input is rendered, so
a failing input never leaves a half-written table behind. Output already
flushed for earlier inputs stays on the stream.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, TextIO

from pqmeta.config.settings import InspectConfig
from pqmeta.connectors.handle import SourceHandle
from pqmeta.logging import get_logger
from pqmeta.model.types import Footer
from pqmeta.reader.footer import MetadataProvider, ParquetFooterReader
from pqmeta.render.json_encoder import MetadataJsonEncoder
from pqmeta.render.printer import ColumnTablePrinter
from pqmeta.render.walker import MetadataTableWalker

_logger = get_logger(__name__)

FILE_HEADER = "file: {}"


class InspectionDriver:
    def __init__(
        self,
        out: TextIO,
        config: Optional[InspectConfig] = None,
        provider: Optional[MetadataProvider] = None,
    ):
        self.out = out
        self.config = config or InspectConfig()
        self.provider = provider or ParquetFooterReader()

    def resolve(self, source: str) -> List[Footer]:
        handle = SourceHandle.from_uri(source)
        footers = self.provider.read_footers(handle)
        _logger.debug("%s resolved to %d footer(s)", source, len(footers))
        for footer in footers:
            _logger.debug(
                "%s: %d row(s) in %d row group(s)",
                footer.file,
                footer.metadata.row_count,
                len(footer.metadata.blocks),
            )
        return footers

    def run(self, inputs: Sequence[str]) -> int:
        """Render every input; returns the number of footers rendered."""
        if self.config.json_mode:
            return self._run_json(inputs)
        return self._run_table(inputs)

    def _run_json(self, inputs: Sequence[str]) -> int:
        footers: List[Footer] = []
        for source in inputs:
            footers.extend(self.resolve(source))
        encoder = MetadataJsonEncoder()
        try:
            self.out.write(encoder.encode((f.metadata for f in footers), self.config.multiline))
        finally:
            self.out.flush()
        return len(footers)

    def _run_table(self, inputs: Sequence[str]) -> int:
        walker = MetadataTableWalker(self.config.type_names)
        rendered = 0
        with ColumnTablePrinter(
            self.out,
            column_padding=self.config.column_padding,
            whitespace=self.config.whitespace,
        ) as printer:
            for source in inputs:
                for footer in self.resolve(source):
                    walker.render(printer, footer.metadata)
                    printer.format(FILE_HEADER, footer.file)
                    printer.flush_columns()
                    rendered += 1
        return rendered
