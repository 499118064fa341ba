"""
CLI: ``storm providers`` - inspect configured and discovered service providers.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from storm.cli.utils import console, err_console, make_application, print_table
from storm.foundation.application import partition_providers

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_providers(
    base_path: Path | None = typer.Option(None, "--base-path", "-b", help="Application root"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List providers in load order with the group each belongs to."""
    application = make_application(base_path)
    settings = application.settings
    core, configured = partition_providers(settings.providers, settings.core_provider_prefix)
    discovered = application.make("package.manifest").providers() if settings.load_discovered_packages else []

    rows = (
        [{"provider": p, "group": "core"} for p in core]
        + [{"provider": p, "group": "discovered"} for p in discovered]
        + [{"provider": p, "group": "application"} for p in configured]
    )

    if as_json:
        console.print_json(json.dumps(rows))
        return
    print_table(rows, title="Service providers")


@app.command("load")
def load_providers(
    base_path: Path | None = typer.Option(None, "--base-path", "-b", help="Application root"),
) -> None:
    """Load providers through the services cache (clearing it once on failure)."""
    application = make_application(base_path)
    try:
        manifest = application.register_configured_providers()
    except Exception as e:
        err_console.print(f"[bold red]Error[/bold red]: {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✓[/green] {len(manifest.eager)} eager, {len(manifest.deferred)} deferred services")
    console.print(f"Cache: {application.cached_services_path()}")
