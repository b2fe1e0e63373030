# src/pqmeta/connectors/filesystem.py
"""
Input resolution: one SourceHandle → an ordered list of physical files.

- file       → itself
- directory  → its visible files (names starting with "_" or "." are
               skipped, e.g. _SUCCESS, _metadata, .crc files), sorted
- glob       → every match, sorted (expanded by DuckDB, which handles both
               local paths and s3://)
- missing    → ResolutionError
"""

from __future__ import annotations

import posixpath
from typing import List, Optional

import pyarrow as pa
import pyarrow.fs as pafs

from pqmeta.errors import ResolutionError
from pqmeta.logging import get_logger

from .handle import SourceHandle

_logger = get_logger(__name__)


def is_hidden(name: str) -> bool:
    base = posixpath.basename(name.rstrip("/"))
    return base.startswith("_") or base.startswith(".")


def build_filesystem(handle: SourceHandle) -> pafs.FileSystem:
    """PyArrow filesystem able to open paths of ``handle``."""
    if not handle.is_remote:
        return pafs.LocalFileSystem()

    opts = handle.fs_opts
    endpoint = opts.get("s3_endpoint")
    scheme = "https"
    if endpoint:
        if endpoint.startswith("http://") or opts.get("s3_use_ssl") == "false":
            scheme = "http"
        endpoint = endpoint.replace("https://", "").replace("http://", "")
    return pafs.S3FileSystem(
        access_key=opts.get("s3_access_key_id"),
        secret_key=opts.get("s3_secret_access_key"),
        session_token=opts.get("s3_session_token"),
        region=opts.get("s3_region"),
        scheme=scheme,
        endpoint_override=endpoint,
    )


def to_fs_path(handle: SourceHandle, location: str) -> str:
    """Path form PyArrow expects: "bucket/key" for S3, absolute path locally."""
    if handle.is_remote:
        return location.split("://", 1)[1]
    return location


def _to_display(handle: SourceHandle, fs_path: str) -> str:
    if handle.is_remote:
        return f"{handle.scheme}://{fs_path}"
    return fs_path


# ---------- globs ----------

def _configure_duckdb_s3(con, fs_opts) -> None:
    if fs_opts.get("s3_endpoint"):
        raw_endpoint = fs_opts["s3_endpoint"]
        endpoint = raw_endpoint.replace("https://", "").replace("http://", "")
        con.execute(f"SET s3_endpoint='{endpoint}'")
        if raw_endpoint.startswith("http://"):
            con.execute("SET s3_use_ssl=false")
        # custom endpoints (MinIO, ...) want path-style URLs
        con.execute("SET s3_url_style='path'")
    if fs_opts.get("s3_access_key_id"):
        con.execute(f"SET s3_access_key_id='{fs_opts['s3_access_key_id']}'")
    if fs_opts.get("s3_secret_access_key"):
        con.execute(f"SET s3_secret_access_key='{fs_opts['s3_secret_access_key']}'")
    if fs_opts.get("s3_session_token"):
        con.execute(f"SET s3_session_token='{fs_opts['s3_session_token']}'")
    if fs_opts.get("s3_region"):
        con.execute(f"SET s3_region='{fs_opts['s3_region']}'")
    if fs_opts.get("s3_use_ssl") == "false":
        con.execute("SET s3_use_ssl=false")
    if fs_opts.get("s3_url_style"):
        con.execute(f"SET s3_url_style='{fs_opts['s3_url_style']}'")


def expand_glob(handle: SourceHandle) -> List[str]:
    """All files matching a glob input, sorted."""
    import duckdb

    pattern = handle.uri if handle.is_remote else handle.path
    con = duckdb.connect()
    try:
        if handle.is_remote:
            _configure_duckdb_s3(con, handle.fs_opts)
        quoted = pattern.replace("'", "''")
        rows = con.execute(f"SELECT file FROM glob('{quoted}')").fetchall()
    except duckdb.Error as e:
        raise ResolutionError(handle.uri, f"glob expansion failed ({e})", e) from e
    finally:
        con.close()

    files = sorted(r[0] for r in rows)
    _logger.debug("glob %s matched %d file(s)", pattern, len(files))
    return files


# ---------- public API ----------

def list_files(handle: SourceHandle, filesystem: Optional[pafs.FileSystem] = None) -> List[str]:
    """
    Resolve ``handle`` to physical file locations, in display form.

    Raises ResolutionError when nothing readable is found.
    """
    if handle.is_glob:
        files = expand_glob(handle)
        if not files:
            raise ResolutionError(handle.uri, "no files match the pattern")
        return files

    fs = filesystem or build_filesystem(handle)
    fs_path = to_fs_path(handle, handle.path)
    try:
        info = fs.get_file_info(fs_path)
    except (OSError, pa.ArrowException) as e:
        raise ResolutionError(handle.uri, f"storage unreachable ({e})", e) from e

    if info.type == pafs.FileType.NotFound:
        raise ResolutionError(handle.uri, "no such file or directory")

    if info.type == pafs.FileType.Directory:
        try:
            entries = fs.get_file_info(pafs.FileSelector(fs_path, recursive=False))
        except (OSError, pa.ArrowException) as e:
            raise ResolutionError(handle.uri, f"cannot list directory ({e})", e) from e
        files = sorted(
            _to_display(handle, e.path)
            for e in entries
            if e.type == pafs.FileType.File and not is_hidden(e.path)
        )
        if not files:
            raise ResolutionError(handle.uri, "directory contains no data files")
        _logger.debug("directory %s expanded to %d file(s)", handle.uri, len(files))
        return files

    return [_to_display(handle, fs_path)]
