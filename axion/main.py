from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from axion.config import get_settings
from axion.errors import ConnectionError
from axion.infrastructure.db_factory import build_dsn, connect
from axion.publisher import publish as publish_stubs
from axion.utils.logging import configure_logging

app = typer.Typer(help="Axion companion CLI.")


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective database configuration values.
    """
    settings = get_settings()
    table = Table(title="Axion configuration", box=box.SIMPLE_HEAVY)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Driver", settings.driver)
    table.add_row("DSN", build_dsn(settings))
    table.add_row("Base path", str(settings.app_base_path))
    table.add_row("Statement timeout (ms)", str(settings.db_statement_timeout_ms or "off"))
    table.add_row("Environment", settings.app_env)
    Console().print(table)


@app.command()
def check() -> None:
    """
    Open a connection and run a trivial query.
    """
    settings = get_settings()
    try:
        with connect(settings) as conn:
            conn.fetch_one("SELECT 1 AS ok", table="-", operation="ping")
    except ConnectionError as exc:
        typer.echo(f"Database connection failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"OK: {build_dsn(settings)}")


@app.command()
def publish(
    base_path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Application root to publish into (default: APP_BASE_PATH).",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Publish into an existing folder without asking.",
    ),
) -> None:
    """
    Copy Axion's controller, route and view stubs into the application.
    """
    root = base_path or get_settings().app_base_path
    result = publish_stubs(
        root,
        confirm=lambda question: force or typer.confirm(question, default=False),
    )
    if result.cancelled:
        typer.echo("Canceled. No files were copied.")
        return
    for path in result.skipped:
        typer.echo(f"Skipped existing file: {path}")
    typer.echo(f"Published {len(result.copied)} file(s) to '{result.target}'.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
