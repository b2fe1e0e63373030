# src/pqmeta/connectors/handle.py
from __future__ import annotations

"""
SourceHandle — a normalized view of one user-supplied input.

  - `uri`:     the string as given ("s3://bucket/part-*.parquet", "data/x.parquet")
  - `scheme`:  "s3", "file", "" (bare local path), ...
  - `path`:    what the filesystem layer should be handed. Local inputs are
               made absolute; `file://` URIs lose their scheme.
  - `fs_opts`: normalized storage options pulled from the environment
               (S3 credentials, region, endpoint, URL style).
  - `is_glob`: the input contains glob characters and must be expanded.

Small and immutable; the resolver and footer reader read it, nothing writes it.
"""

from dataclasses import dataclass, field
from typing import Dict
import os
from urllib.parse import urlparse

_GLOB_CHARS = set("*?[]")

REMOTE_SCHEMES = ("s3", "s3a", "s3n")


def is_glob_pattern(path: str) -> bool:
    """Check if path contains glob pattern characters."""
    return any(c in path for c in _GLOB_CHARS)


@dataclass(frozen=True)
class SourceHandle:
    uri: str
    scheme: str
    path: str
    fs_opts: Dict[str, str] = field(default_factory=dict)
    is_glob: bool = False

    @property
    def is_remote(self) -> bool:
        return self.scheme in REMOTE_SCHEMES

    @staticmethod
    def from_uri(uri: str) -> "SourceHandle":
        """
        Examples:
          - "s3://my-bucket/data/part-0.parquet"
          - "/data/users.parquet"          (scheme = "")
          - "file:///data/users.parquet"   (scheme = "file")
          - "data/*.parquet"               (glob)
        """
        parsed = urlparse(uri)
        scheme = (parsed.scheme or "").lower()
        # Windows drive letters parse as a one-letter scheme
        if len(scheme) == 1:
            scheme = ""

        fs_opts: Dict[str, str] = {}
        if scheme in REMOTE_SCHEMES:
            _inject_s3_env(fs_opts)
            path = uri
        elif scheme == "file":
            path = os.path.abspath(parsed.path)
        else:
            path = os.path.abspath(os.path.expanduser(uri))

        return SourceHandle(
            uri=uri,
            scheme=scheme,
            path=path,
            fs_opts=fs_opts,
            is_glob=is_glob_pattern(uri),
        )


# ------------------------------ Helpers ---------------------------------------


def _inject_s3_env(opts: Dict[str, str]) -> None:
    """
    Read S3/MinIO-related environment variables and copy them into `opts`
    under normalized keys. Values are never logged.
    """
    ak = os.getenv("AWS_ACCESS_KEY_ID")
    sk = os.getenv("AWS_SECRET_ACCESS_KEY")
    st = os.getenv("AWS_SESSION_TOKEN")

    region = os.getenv("DUCKDB_S3_REGION") or os.getenv("AWS_REGION") or "us-east-1"

    endpoint = os.getenv("DUCKDB_S3_ENDPOINT") or os.getenv("AWS_ENDPOINT_URL")
    url_style = os.getenv("DUCKDB_S3_URL_STYLE")  # 'path' | 'host'
    use_ssl = os.getenv("DUCKDB_S3_USE_SSL")      # 'true' | 'false'

    if ak:
        opts["s3_access_key_id"] = ak
    if sk:
        opts["s3_secret_access_key"] = sk
    if st:
        opts["s3_session_token"] = st
    if region:
        opts["s3_region"] = region
    if endpoint:
        opts["s3_endpoint"] = endpoint
    if url_style:
        opts["s3_url_style"] = url_style
    if use_ssl:
        opts["s3_use_ssl"] = use_ssl
