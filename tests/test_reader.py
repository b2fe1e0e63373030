# tests/test_reader.py
"""
Tests for reading real Parquet footers into the metadata model.
"""

from io import StringIO
from pathlib import Path
from types import SimpleNamespace

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from pqmeta.connectors.handle import SourceHandle, is_glob_pattern
from pqmeta.errors import ResolutionError
from pqmeta.model.types import MetadataModel, Repetition
from pqmeta.reader.footer import ParquetFooterReader, _flat_schema, parse_schema_text, read_metadata
from pqmeta.render.printer import ColumnTablePrinter
from pqmeta.render.walker import MetadataTableWalker


def _write(path: Path, n: int = 3) -> str:
    pq.write_table(pa.table({"x": pa.array(list(range(n)), type=pa.int32())}), str(path))
    return str(path)


# ---------------------------------------------------------------------------
# Schema printout parsing
# ---------------------------------------------------------------------------


SCHEMA_TEXT = """<pyarrow._parquet.ParquetSchema object at 0x7f0000000000>
required group field_id=-1 schema {
  optional int64 field_id=-1 id;
  optional binary field_id=-1 name (String);
  optional fixed_len_byte_array(16) field_id=-1 amount (Decimal(precision=38, scale=2));
  optional group field_id=-1 tags (List) {
    repeated group field_id=-1 list {
      optional binary field_id=-1 element (String);
    }
  }
}
"""


class TestParseSchemaText:
    """Recovering the group tree from the schema printout."""

    def test_tree_structure(self):
        root = parse_schema_text(SCHEMA_TEXT)
        assert root.name == "schema"
        assert [c.name for c in root.children] == ["id", "name", "amount", "tags"]
        tags = root.children[3]
        assert tags.physical is None
        assert tags.annotation == "List"
        assert tags.children[0].repetition is Repetition.REPEATED
        assert tags.children[0].children[0].name == "element"

    def test_primitive_details(self):
        root = parse_schema_text(SCHEMA_TEXT)
        id_, name, amount, _ = root.children
        assert id_.physical == "INT64"
        assert id_.annotation is None
        assert name.physical == "BYTE_ARRAY"
        assert name.annotation == "String"
        assert amount.physical == "FIXED_LEN_BYTE_ARRAY"
        assert amount.length == 16
        assert amount.annotation == "Decimal(precision=38, scale=2)"

    def test_without_field_ids(self):
        root = parse_schema_text("required group schema {\n  required int32 a;\n}\n")
        assert root.children[0].name == "a"
        assert root.children[0].repetition is Repetition.REQUIRED

    def test_unbalanced_braces(self):
        assert parse_schema_text("required group schema {\n  required int32 a;\n") is None

    def test_garbage(self):
        assert parse_schema_text("not a schema") is None


# ---------------------------------------------------------------------------
# Single files
# ---------------------------------------------------------------------------


class TestFlatFile:
    """File written by polars."""

    def test_schema(self, polars_file):
        [footer] = read_metadata(polars_file)
        schema = footer.metadata.schema
        assert [c.name for c in schema.children] == ["id", "name"]
        assert schema.children[0].physical_type == "INT32"
        assert schema.children[1].physical_type == "BYTE_ARRAY"
        assert schema.children[1].logical_type == "String"

    def test_blocks(self, polars_file):
        [footer] = read_metadata(polars_file)
        model = footer.metadata
        assert model.row_count == 6
        col = model.blocks[0].columns[0]
        assert col.path == "id"
        assert col.codec == "SNAPPY"
        assert col.value_count == 6
        assert col.total_size > 0

    def test_statistics(self, polars_file):
        [footer] = read_metadata(polars_file)
        name_col = footer.metadata.blocks[0].columns[1]
        assert name_col.statistics is not None
        assert name_col.statistics.null_count == 1

    def test_footer_file_is_absolute(self, polars_file):
        [footer] = read_metadata(polars_file)
        assert Path(footer.file).is_absolute()
        assert footer.file.endswith("users.parquet")


class TestArrowFile:
    """File written by pyarrow with several row groups."""

    def test_row_groups_in_order(self, arrow_file):
        [footer] = read_metadata(arrow_file)
        assert [b.row_count for b in footer.metadata.blocks] == [2, 2, 1]

    def test_key_value_metadata(self, arrow_file):
        [footer] = read_metadata(arrow_file)
        kv = footer.metadata.key_value_metadata
        assert kv["owner"] == "data team"
        assert "ARROW:schema" in kv

    def test_created_by(self, arrow_file):
        [footer] = read_metadata(arrow_file)
        assert footer.metadata.created_by.startswith("parquet-cpp")

    def test_min_max(self, arrow_file):
        [footer] = read_metadata(arrow_file)
        stats = footer.metadata.blocks[0].columns[0].statistics
        assert stats.has_min_max
        assert (stats.min, stats.max) == (10, 20)
        assert stats.null_count == 0

    def test_original_type(self, arrow_file):
        [footer] = read_metadata(arrow_file)
        kind = footer.metadata.schema.children[1]
        assert kind.original_type == "UTF8"
        assert kind.repetition is Repetition.OPTIONAL


class TestNestedFile:
    """Struct and list columns keep their group structure."""

    def test_struct(self, nested_file):
        [footer] = read_metadata(nested_file)
        s = footer.metadata.schema.children[0]
        assert s.is_group
        assert [c.name for c in s.children] == ["a", "b"]
        assert s.children[0].physical_type == "INT32"

    def test_list(self, nested_file):
        [footer] = read_metadata(nested_file)
        lst = footer.metadata.schema.children[1]
        assert lst.name == "l"
        assert lst.logical_type == "List"
        assert lst.original_type == "LIST"
        assert lst.children[0].repetition is Repetition.REPEATED

    def test_leaf_order_matches_chunks(self, nested_file):
        [footer] = read_metadata(nested_file)
        model = footer.metadata
        leaf_paths = [".".join(p) for p, _ in model.schema.leaves()]
        assert leaf_paths == [c.path for c in model.blocks[0].columns]


class TestParenthesizedNames:
    """Column names ending in "(...)" next to real annotations."""

    def test_both_readings_kept(self):
        root = parse_schema_text(
            "required group schema {\n"
            "  optional double price (USD);\n"
            "  optional binary label (EUR) (String);\n"
            "}\n"
        )
        price, label = root.children
        assert (price.name, price.annotation, price.raw_name) == ("price", "USD", "price (USD)")
        assert (label.name, label.annotation) == ("label (EUR)", "String")

    def test_map_and_parenthesized_column(self, map_file):
        [footer] = read_metadata(map_file)
        schema = footer.metadata.schema
        m, price = schema.children

        assert price.name == "price (USD)"
        assert price.physical_type == "DOUBLE"
        assert price.logical_type is None

        assert m.is_group and m.logical_type == "Map"
        key_value = m.children[0]
        assert key_value.repetition is Repetition.REPEATED
        key = key_value.children[0]
        assert key.name == "key"
        assert key.repetition is Repetition.REQUIRED
        assert (key.max_repetition_level, key.max_definition_level) == (1, 2)

    def test_map_levels_in_table(self, map_file):
        out = StringIO()
        with ColumnTablePrinter(out) as printer:
            [footer] = read_metadata(map_file)
            MetadataTableWalker().render(printer, footer.metadata)
        key_row = next(l for l in out.getvalue().splitlines() if l.startswith("..key:"))
        assert "REQUIRED" in key_row
        assert "R:1 D:2" in key_row
        assert any(l.startswith("price (USD):") for l in out.getvalue().splitlines())


class TestFlatFallback:
    """Leaf-only schema keeps the column descriptors' levels."""

    def _column(self, path, physical, max_rep, max_def, length=None):
        return SimpleNamespace(
            path=path,
            physical_type=physical,
            length=length,
            max_repetition_level=max_rep,
            max_definition_level=max_def,
            logical_type=None,
            converted_type=None,
        )

    def test_levels_taken_from_columns(self):
        schema = _flat_schema(
            [
                self._column("m.key_value.key", "BYTE_ARRAY", 1, 2),
                self._column("h", "FIXED_LEN_BYTE_ARRAY", 0, 1, length=16),
            ]
        )
        key, h = schema.children
        assert key.name == "m.key_value.key"
        assert (key.max_repetition_level, key.max_definition_level) == (1, 2)
        assert h.repetition is Repetition.OPTIONAL
        assert h.type_length == 16

    def test_walker_prints_column_levels(self):
        schema = _flat_schema([self._column("m.key_value.key", "BYTE_ARRAY", 1, 2)])
        out = StringIO()
        with ColumnTablePrinter(out) as printer:
            MetadataTableWalker().render(printer, MetadataModel(schema=schema))
        key_row = next(l for l in out.getvalue().splitlines() if l.startswith("m.key_value.key:"))
        assert "R:1 D:2" in key_row


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolution:
    """Directories, globs and failures."""

    def test_directory_skips_hidden_files(self, tmp_path):
        _write(tmp_path / "part-1.parquet", 2)
        _write(tmp_path / "part-0.parquet", 1)
        (tmp_path / "_SUCCESS").write_text("")
        (tmp_path / ".part-0.parquet.crc").write_text("x")

        footers = read_metadata(str(tmp_path))
        assert [Path(f.file).name for f in footers] == ["part-0.parquet", "part-1.parquet"]
        assert [f.metadata.row_count for f in footers] == [1, 2]

    def test_glob(self, tmp_path):
        _write(tmp_path / "b.parquet")
        _write(tmp_path / "a.parquet")
        _write(tmp_path / "c.other")

        footers = read_metadata(str(tmp_path / "*.parquet"))
        assert [Path(f.file).name for f in footers] == ["a.parquet", "b.parquet"]

    def test_glob_without_matches(self, tmp_path):
        with pytest.raises(ResolutionError, match="no files match"):
            read_metadata(str(tmp_path / "*.parquet"))

    def test_missing_path(self, tmp_path):
        missing = str(tmp_path / "missing.parquet")
        with pytest.raises(ResolutionError) as exc_info:
            read_metadata(missing)
        assert exc_info.value.source == missing

    def test_not_parquet(self, tmp_path):
        bogus = tmp_path / "bogus.parquet"
        bogus.write_text("definitely not parquet")
        with pytest.raises(ResolutionError, match="not a readable Parquet file"):
            read_metadata(str(bogus))

    def test_empty_directory(self, tmp_path):
        (tmp_path / "_SUCCESS").write_text("")
        with pytest.raises(ResolutionError, match="no data files"):
            read_metadata(str(tmp_path))

    def test_file_uri(self, polars_file):
        [footer] = ParquetFooterReader().read_footers(SourceHandle.from_uri("file://" + polars_file))
        assert footer.file == polars_file


class TestSourceHandle:
    """Input normalization."""

    def test_local_path_made_absolute(self):
        h = SourceHandle.from_uri("data/x.parquet")
        assert h.scheme == ""
        assert Path(h.path).is_absolute()
        assert not h.is_remote

    def test_s3_reads_env(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "ak")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.delenv("DUCKDB_S3_REGION", raising=False)
        h = SourceHandle.from_uri("s3://bucket/key.parquet")
        assert h.is_remote
        assert h.path == "s3://bucket/key.parquet"
        assert h.fs_opts["s3_access_key_id"] == "ak"
        assert h.fs_opts["s3_region"] == "eu-west-1"

    def test_glob_detection(self):
        assert is_glob_pattern("data/part-*.parquet")
        assert not is_glob_pattern("data/part-0.parquet")
        assert SourceHandle.from_uri("data/*.parquet").is_glob
