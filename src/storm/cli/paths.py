"""
CLI: ``storm paths`` - show the resolved directory layout.
"""

from __future__ import annotations

from pathlib import Path

import typer

from storm.cli.utils import make_application, print_table

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_paths(
    base_path: Path | None = typer.Option(None, "--base-path", "-b", help="Application root"),
) -> None:
    """Show the named application directories."""
    application = make_application(base_path)
    rows = [{"binding": key, "path": value} for key, value in application.paths.as_dict().items()]
    print_table(rows, title="Application paths")
