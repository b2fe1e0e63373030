"""Meta command for pqmeta CLI."""

from __future__ import annotations

import sys
from typing import List, Optional

import typer

from pqmeta.cli.constants import (
    EXIT_CONFIG_ERROR,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
)


def register(app: typer.Typer) -> None:
    """Register the meta command with the app."""

    @app.command("meta")
    def meta(
        inputs: List[str] = typer.Argument(
            ..., help="Parquet file(s), directories, globs or s3:// URIs."
        ),
        json_output: bool = typer.Option(
            False, "--json", "-j", help="Display meta in JSON."
        ),
        multiline: bool = typer.Option(
            False, "--multiline", "-m", help="Make the JSON output multiline."
        ),
        original_type: bool = typer.Option(
            False,
            "--originalType",
            "-o",
            help="Print logical types in OriginalType representation.",
        ),
        column_padding: Optional[int] = typer.Option(
            None, "--column-padding", help="Spaces between table columns (default: 1)."
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Enable verbose output."
        ),
    ) -> None:
        """
        Print the metadata of Parquet file(s).

        Table output shows, per file, the creator, key/value metadata, the
        schema and every row group with its column chunks. JSON output drops
        key/value metadata.

        Examples:
            pqmeta meta data.parquet
            pqmeta meta warehouse/events/ -o
            pqmeta meta "s3://bucket/part-*.parquet" -j -m
        """
        from pqmeta.errors import (
            ConfigError,
            FormattingFault,
            ResolutionError,
            format_error_for_cli,
        )
        from pqmeta.logging import configure_logging
        from pqmeta.reporters.rich_reporter import report_failure, report_hint

        configure_logging(verbose=verbose)

        try:
            from pqmeta.config.settings import resolve_effective_config
            from pqmeta.driver import InspectionDriver
            from pqmeta.render.walker import TypeNames

            cli_overrides = {
                "output": "json" if json_output else None,
                "multiline": True if multiline else None,
                "type_names": TypeNames.LEGACY if original_type else None,
                "column_padding": column_padding,
            }
            config = resolve_effective_config(cli_overrides=cli_overrides)

            driver = InspectionDriver(sys.stdout, config)
            driver.run(inputs)
            raise typer.Exit(code=EXIT_SUCCESS)

        except typer.Exit:
            raise

        except (ConfigError, ResolutionError) as e:
            report_failure(format_error_for_cli(e))
            _maybe_traceback(verbose, report_hint)
            raise typer.Exit(code=EXIT_CONFIG_ERROR)

        except FormattingFault as e:
            report_failure(f"Internal rendering error: {format_error_for_cli(e)}")
            _maybe_traceback(verbose, report_hint)
            raise typer.Exit(code=EXIT_RUNTIME_ERROR)

        except Exception as e:
            report_failure(format_error_for_cli(e))
            if not _maybe_traceback(verbose, report_hint):
                report_hint("Use --verbose for full traceback.")
            raise typer.Exit(code=EXIT_RUNTIME_ERROR)


def _maybe_traceback(verbose: bool, report) -> bool:
    if not verbose:
        return False
    import traceback

    report(traceback.format_exc())
    return True
