from pqmeta.errors import ResolutionError
from pqmeta.model.types import (
    Block,
    ColumnChunk,
    MetadataModel,
    Repetition,
    SchemaField,
    Statistics,
)

CREATED_BY = "parquet-cpp-arrow version 15.0.0"


def make_simple_model(
    column_name="id",
    created_by=CREATED_BY,
    key_value_metadata=None,
    statistics=Statistics(min=1, max=10, null_count=0, has_min_max=True),
):
    """One INT32 column, one block of 10 rows."""
    schema = SchemaField(
        name="schema",
        children=(
            SchemaField(name=column_name, repetition=Repetition.REQUIRED, physical_type="INT32"),
        ),
    )
    chunk = ColumnChunk(
        path=column_name,
        codec="SNAPPY",
        encodings=("RLE", "PLAIN", "RLE"),
        value_count=10,
        total_size=49,
        total_uncompressed_size=51,
        physical_type="INT32",
        first_data_page=4,
        statistics=statistics,
    )
    return MetadataModel(
        schema=schema,
        blocks=(Block(row_count=10, total_byte_size=51, columns=(chunk,), starting_pos=4),),
        key_value_metadata=key_value_metadata if key_value_metadata is not None else {},
        created_by=created_by,
    )


def make_nested_model():
    """A string column plus an optional list of strings; no row groups."""
    element = SchemaField(
        name="element",
        repetition=Repetition.OPTIONAL,
        physical_type="BYTE_ARRAY",
        logical_type="String",
        original_type="UTF8",
    )
    schema = SchemaField(
        name="schema",
        children=(
            SchemaField(
                name="name",
                repetition=Repetition.OPTIONAL,
                physical_type="BYTE_ARRAY",
                logical_type="String",
                original_type="UTF8",
            ),
            SchemaField(
                name="tags",
                repetition=Repetition.OPTIONAL,
                logical_type="List",
                original_type="LIST",
                children=(
                    SchemaField(name="list", repetition=Repetition.REPEATED, children=(element,)),
                ),
            ),
        ),
    )
    return MetadataModel(schema=schema, blocks=(), created_by="pqmeta-tests")


class FakeProvider:
    """MetadataProvider serving canned footers keyed by input string."""

    def __init__(self, footers_by_input):
        self.footers_by_input = footers_by_input
        self.calls = []

    def read_footers(self, handle):
        self.calls.append(handle.uri)
        if handle.uri not in self.footers_by_input:
            raise ResolutionError(handle.uri, "no such file or directory")
        return self.footers_by_input[handle.uri]


def lines_of(text):
    """Output lines without the final newline's empty tail."""
    return text.split("\n")[:-1] if text.endswith("\n") else text.split("\n")


def cell_start(line, text):
    """Offset of ``text`` inside ``line`` (must be present)."""
    idx = line.find(text)
    assert idx >= 0, f"{text!r} not in {line!r}"
    return idx
