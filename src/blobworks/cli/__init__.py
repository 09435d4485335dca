"""CLI commands for blobworks.

Provides command-line interface using Typer:
- blobworks serve: Run the API server
- blobworks bootstrap: Prepare the entry store and blob connectors

Usage:
    blobworks --help
    blobworks serve --port 8080
    blobworks bootstrap
"""

import typer

from blobworks.cli.bootstrap_cmd import app as bootstrap_app
from blobworks.cli.serve import app as serve_app

app = typer.Typer(
    name="blobworks",
    help="blobworks: content-addressed blob storage",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(bootstrap_app, name="bootstrap")


@app.callback()
def callback() -> None:
    """blobworks: content-addressed blob storage."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
