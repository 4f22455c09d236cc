"""Utility functions for the Prompt Context CLI."""

import click
from rich.console import Console
from rich.table import Table

from prompt_context.core.errors import PromptContextError
from prompt_context.core.matcher import PromptMatcher
from prompt_context.mcp_server.config import load_settings

console = Console()
err_console = Console(stderr=True)


def build_matcher(ctx: click.Context) -> PromptMatcher:
    """Build a matcher from the settings stored on the click context."""
    settings = ctx.obj.get("settings") if ctx.obj else None
    try:
        return PromptMatcher.from_settings(settings or load_settings())
    except PromptContextError as e:
        echo_error(e.message)
        ctx.exit(1)


def print_table(
    rows: list[dict], title: str = "", headers: list[str] | None = None
) -> None:
    """Print rows as a rich table."""
    if not rows:
        console.print(f"[yellow]No {title.lower()} found.[/yellow]")
        return

    headers = headers or list(rows[0].keys())
    table = Table(title=title)
    for header in headers:
        table.add_column(header.replace("_", " ").title())
    for row in rows:
        table.add_row(*[str(row.get(header, "")) for header in headers])

    console.print(table)


def echo_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓ {message}[/green]")


def echo_error(message: str) -> None:
    """Print error message."""
    err_console.print(f"[red]✗ {message}[/red]")


def echo_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠ {message}[/yellow]")
