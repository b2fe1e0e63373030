from .types import (
    Block,
    ColumnChunk,
    Footer,
    MetadataModel,
    Repetition,
    SchemaField,
    Statistics,
)

__all__ = [
    "Block",
    "ColumnChunk",
    "Footer",
    "MetadataModel",
    "Repetition",
    "SchemaField",
    "Statistics",
]
