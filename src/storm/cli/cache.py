"""
CLI: ``storm cache`` - kernel cache management.
"""

from __future__ import annotations

from pathlib import Path

import typer

from storm.cli.utils import console, err_console, make_application, print_table
from storm.core.errors import StorageError

app = typer.Typer(no_args_is_help=True)


@app.command("clear")
def clear_cache(
    base_path: Path | None = typer.Option(None, "--base-path", "-b", help="Application root"),
) -> None:
    """Delete the packages, services and classes caches."""
    application = make_application(base_path)
    try:
        application.clear_package_cache()
    except StorageError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e}")
        raise typer.Exit(code=1) from e
    console.print("[green]✓[/green] Package, service and class caches cleared")


@app.command("paths")
def cache_paths(
    base_path: Path | None = typer.Option(None, "--base-path", "-b", help="Application root"),
) -> None:
    """Show where each cache file lives and whether it exists."""
    application = make_application(base_path)
    files = application.make("files")
    rows = [
        {"cache": name, "path": path, "exists": "yes" if files.exists(path) else "no"}
        for name, path in (
            ("config", application.cached_config_path()),
            ("routes", application.cached_routes_path()),
            ("compiled", application.cached_compile_path()),
            ("services", application.cached_services_path()),
            ("packages", application.cached_packages_path()),
            ("classes", application.cached_classes_path()),
        )
    ]
    print_table(rows, title="Cache files")
