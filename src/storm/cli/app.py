"""
Root Typer application for the ``storm`` CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from storm import __version__
from storm.cli.cache import app as cache_app
from storm.cli.config import app as config_app
from storm.cli.paths import app as paths_app
from storm.cli.providers import app as providers_app
from storm.core.logging import configure_logging

app = Typer(
    name="storm",
    help="storm - Storm CMS application kernel tools.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"storm {__version__} - Storm CMS")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Kernel log level."),
) -> None:
    """storm CLI - inspect paths, providers, caches and configuration."""
    configure_logging(level=log_level, json_format=False, service="storm-cli", cache_loggers=False)


app.add_typer(cache_app, name="cache", help="Kernel cache management.")
app.add_typer(providers_app, name="providers", help="Service provider inspection.")
app.add_typer(paths_app, name="paths", help="Application directory layout.")
app.add_typer(config_app, name="config", help="Configuration inspection.")
