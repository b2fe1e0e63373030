from .json_encoder import MetadataJsonEncoder
from .printer import ColumnTablePrinter, Row, WhitespaceHandler
from .walker import MetadataTableWalker, TypeNames

__all__ = [
    "ColumnTablePrinter",
    "MetadataJsonEncoder",
    "MetadataTableWalker",
    "Row",
    "TypeNames",
    "WhitespaceHandler",
]
