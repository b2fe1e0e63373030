# src/pqmeta/__init__.py
"""
pqmeta - print Parquet footer metadata

Usage:
    # CLI
    $ pqmeta meta data.parquet
    $ pqmeta meta warehouse/events/ --originalType
    $ pqmeta meta "s3://bucket/part-*.parquet" --json --multiline

    # Python API - render to a stream
    import pqmeta
    pqmeta.inspect(["data.parquet"])                      # table to stdout
    pqmeta.inspect(["data.parquet"], out=buf, json_mode=True)

    # Python API - the model itself
    footers = pqmeta.read_metadata("data.parquet")
    footers[0].metadata.blocks[0].row_count
"""

from pqmeta.version import VERSION as __version__

import sys
from typing import Optional, Sequence, TextIO, Union

from pqmeta.config.settings import InspectConfig, resolve_effective_config
from pqmeta.driver import InspectionDriver
from pqmeta.errors import ConfigError, FormattingFault, PqmetaError, ResolutionError
from pqmeta.model.types import (
    Block,
    ColumnChunk,
    Footer,
    MetadataModel,
    Repetition,
    SchemaField,
    Statistics,
)
from pqmeta.reader.footer import read_metadata
from pqmeta.render.json_encoder import MetadataJsonEncoder
from pqmeta.render.printer import ColumnTablePrinter, Row, WhitespaceHandler
from pqmeta.render.walker import MetadataTableWalker, TypeNames


def inspect(
    inputs: Union[str, Sequence[str]],
    out: Optional[TextIO] = None,
    json_mode: bool = False,
    multiline: bool = False,
    show_original_types: bool = False,
) -> int:
    """
    Render metadata of ``inputs`` to ``out`` (default: stdout).

    Args:
        inputs: A path/URI or a list of them. Directories and globs expand
            to their Parquet files.
        out: Text stream to write to.
        json_mode: JSON instead of the aligned table.
        multiline: Indented JSON (only with ``json_mode``).
        show_original_types: Use original (converted) type names in the table.

    Returns:
        Number of footers rendered.

    Raises:
        ResolutionError: An input is missing or not a Parquet file.
    """
    if isinstance(inputs, str):
        inputs = [inputs]
    config = InspectConfig(
        output="json" if json_mode else "table",
        multiline=multiline,
        type_names=TypeNames.from_flag(show_original_types),
    )
    driver = InspectionDriver(out if out is not None else sys.stdout, config)
    return driver.run(list(inputs))


__all__ = [
    "__version__",
    "inspect",
    "read_metadata",
    # model
    "Block",
    "ColumnChunk",
    "Footer",
    "MetadataModel",
    "Repetition",
    "SchemaField",
    "Statistics",
    # rendering
    "ColumnTablePrinter",
    "InspectionDriver",
    "MetadataJsonEncoder",
    "MetadataTableWalker",
    "Row",
    "TypeNames",
    "WhitespaceHandler",
    # config
    "InspectConfig",
    "resolve_effective_config",
    # errors
    "ConfigError",
    "FormattingFault",
    "PqmetaError",
    "ResolutionError",
]
