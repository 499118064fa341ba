"""
CLI utility helpers - consoles, application construction and output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from storm.core.errors import StormError
from storm.foundation.application import Application

console = Console()
err_console = Console(stderr=True)


def make_application(base_path: Path | None = None) -> Application:
    """Build an application for a CLI command, exiting cleanly on kernel errors."""
    try:
        return Application(base_path)
    except (StormError, ValueError) as e:
        err_console.print(f"[bold red]Error[/bold red]: {e}")
        raise typer.Exit(code=1) from e


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)
