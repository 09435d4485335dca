"""CLI command for preparing storage.

Creates the entry table and every configured connector's directory,
bucket or container.

Usage:
    blobworks bootstrap
"""

from __future__ import annotations

import asyncio

import typer

from blobworks.config import settings
from blobworks.factory import build_components
from blobworks.observability import configure_logging

app = typer.Typer(help="Prepare the entry store and blob connectors")


async def _bootstrap() -> dict[str, bool]:
    components = build_components(settings)
    try:
        return await components.bootstrap()
    finally:
        await components.close()


@app.callback(invoke_without_command=True)
def bootstrap(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    """Bootstrap the entry store and every configured connector."""
    configure_logging(json_format=False, level="DEBUG" if verbose else "WARNING")

    results = asyncio.run(_bootstrap())

    for name, ready in results.items():
        status = typer.style("ok", fg=typer.colors.GREEN) if ready else typer.style(
            "failed", fg=typer.colors.RED
        )
        typer.echo(f"  {name}: {status}")

    if not all(results.values()):
        raise typer.Exit(code=1)
