"""``storm`` command-line interface (typer)."""
