# src/pqmeta/reporters/rich_reporter.py
from rich.console import Console
from rich.markup import escape

# status messages go to stderr; stdout carries only rendered metadata
console = Console(stderr=True, soft_wrap=True)


def report_failure(msg: str):
    console.print(f"[bold red]❌ {escape(msg)}[/bold red]")


def report_hint(msg: str):
    console.print(f"[yellow]{escape(msg)}[/yellow]")
