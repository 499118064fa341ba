"""
CLI: ``storm config`` - configuration inspection.
"""

from __future__ import annotations

import typer

from storm.cli.utils import console, err_console

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show current configuration."""
    from storm.core.config import get_settings

    try:
        settings = get_settings()
    except ValueError as e:
        err_console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1) from e

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump(mode="json").items()):
            console.print(f"STORM_{key.upper()}={value}")
        return

    from rich.table import Table

    env_files = getattr(settings, "_env_files_loaded", [])
    if env_files:
        console.print("[bold]Env Files Loaded:[/bold]")
        for f in env_files:
            console.print(f"  • {f}")

    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in sorted(settings.model_dump(mode="json").items()):
        table.add_row(key, str(value))
    console.print(table)
