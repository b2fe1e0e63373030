from io import StringIO
from pathlib import Path

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from pqmeta.model.types import Footer
from pqmeta.render.printer import ColumnTablePrinter
from utils import FakeProvider, make_nested_model, make_simple_model


# ---------- in-memory models ----------

@pytest.fixture()
def simple_model():
    return make_simple_model()


@pytest.fixture()
def nested_model():
    return make_nested_model()


@pytest.fixture()
def buffer() -> StringIO:
    return StringIO()


@pytest.fixture()
def printer(buffer) -> ColumnTablePrinter:
    return ColumnTablePrinter(buffer)


@pytest.fixture()
def fake_provider():
    """
    Build a FakeProvider from {input: [model or Footer, ...]}.
    Bare models are wrapped in a Footer named after the input.
    """
    def _make(mapping):
        return FakeProvider(
            {
                source: [
                    m if isinstance(m, Footer) else Footer(file=source, metadata=m)
                    for m in models
                ]
                for source, models in mapping.items()
            }
        )
    return _make


# ---------- real parquet files ----------

@pytest.fixture()
def polars_file(tmp_path) -> str:
    """Flat file written by polars: id (INT32), name (string, one null)."""
    out = Path(tmp_path) / "users.parquet"
    df = pl.DataFrame(
        {
            "id": pl.Series("id", [1, 2, 3, 4, 5, 6], dtype=pl.Int32),
            "name": ["ann", "bob", None, "dee", "eve", "fay"],
        }
    )
    df.write_parquet(str(out), compression="snappy", statistics=True)
    return str(out)


@pytest.fixture()
def arrow_file(tmp_path) -> str:
    """Five rows in three row groups, with user key/value metadata."""
    out = Path(tmp_path) / "events.parquet"
    table = pa.table(
        {
            "event_id": pa.array([10, 20, 30, 40, 50], type=pa.int64()),
            "kind": pa.array(["a", "b", "a", None, "c"], type=pa.string()),
        }
    )
    table = table.replace_schema_metadata({"owner": "data team", "note": "line one\nline two"})
    pq.write_table(table, str(out), row_group_size=2, compression="snappy")
    return str(out)


@pytest.fixture()
def nested_file(tmp_path) -> str:
    """A struct column and a list column."""
    out = Path(tmp_path) / "nested.parquet"
    table = pa.table(
        {
            "s": pa.array(
                [{"a": 1, "b": "x"}, {"a": 2, "b": None}],
                type=pa.struct([("a", pa.int32()), ("b", pa.string())]),
            ),
            "l": pa.array([[1, 2], None], type=pa.list_(pa.int64())),
        }
    )
    pq.write_table(table, str(out))
    return str(out)


@pytest.fixture()
def map_file(tmp_path) -> str:
    """A map column next to a column whose name ends in parentheses."""
    out = Path(tmp_path) / "prices.parquet"
    table = pa.table(
        {
            "m": pa.array(
                [[("a", 1), ("b", 2)], None],
                type=pa.map_(pa.string(), pa.int32()),
            ),
            "price (USD)": pa.array([1.5, None], type=pa.float64()),
        }
    )
    pq.write_table(table, str(out))
    return str(out)
