# scholar_cluster/cli/main.py

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from scholar_cluster.cli import corpus_cli, query_cli
from scholar_cluster.cli.common import console

app = typer.Typer(help="Citation-aware semantic search and clustering over paper corpora.")

app.add_typer(query_cli.app, name="query")
app.add_typer(corpus_cli.app, name="corpus")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log ingestion and query details.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
