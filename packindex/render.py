"""
Rendering functions for packindex output.

This module handles all pretty-printing. Core functions return data,
this module makes it human-readable. Data goes to stdout, diagnostics
go to stderr.
"""

from typing import Any, Dict, Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def info(message: str) -> None:
    console.print(f"[bold cyan]|Info|[/bold cyan] {escape(message)}")


def done(message: str) -> None:
    console.print(f"[bold green]|Done|[/bold green] {escape(message)}")


def warn(message: str) -> None:
    err_console.print(f"[bold yellow]|Warn|[/bold yellow] {escape(message)}")


def fatal(message: str) -> None:
    err_console.print(f"[bold red]|Error|[/bold red] {escape(message)}")


def render_entry_list(names: Iterable[str]) -> int:
    """
    Print entry names as a bulleted list.

    Returns:
        Number of entries printed
    """
    console.print("Package list:")
    count = 0
    for name in sorted(names):
        console.print(f"    - [bright_green]{escape(name)}[/bright_green]")
        count += 1
    if not count:
        console.print("    [yellow](no entries)[/yellow]")
    return count


def render_push_reminder(store_path: str) -> None:
    """Tell the operator how to publish the rewritten history."""
    info("You will need to force-push this commit yourself. Type: ")
    info(f"git -C {store_path} push -f")


def render_status(status: Dict[str, Any]) -> None:
    """Render store status as a two-column table."""
    table = Table(
        title="Indexer Status",
        box=box.ROUNDED,
        show_header=False,
    )
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    labels = [
        ('store', "Store"),
        ('remote', "Remote"),
        ('branch', "Branch"),
        ('history_depth', "Commits"),
        ('entries', "Entries"),
        ('last_commit', "Last commit"),
    ]
    for key, label in labels:
        value = status.get(key)
        table.add_row(label, escape(str(value)) if value is not None else "-")

    console.print(table)
