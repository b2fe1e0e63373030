from __future__ import annotations

"""
pqmeta CLI — print Parquet footer metadata.

Thin layer: parse args → build config → run the driver → map errors to exit codes.
"""

from typing import Optional

import typer

from pqmeta.cli.commands import meta
from pqmeta.version import VERSION

app = typer.Typer(help="pqmeta — inspect Parquet footer metadata")


def _version_callback(value: Optional[bool]) -> None:
    if value:
        typer.echo(f"pqmeta {VERSION}")
        raise typer.Exit(code=0)


@app.callback()
def _main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show the pqmeta version and exit.",
        callback=_version_callback,
        is_eager=True,
    )
) -> None:
    del version  # handled by the eager callback


meta.register(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
