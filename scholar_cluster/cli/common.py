# scholar_cluster/cli/common.py

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from scholar_cluster.config.settings import settings
from scholar_cluster.errors import ScholarClusterError
from scholar_cluster.parsing.corpus_parser import ParsedCorpus, parse_file

console = Console()

ABSTRACT_PREVIEW_CHARS = 200


def truncate_abstract(text: str, limit: int = ABSTRACT_PREVIEW_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def resolve_dataset(dataset: Optional[Path]) -> Path:
    """
    Use --dataset if given, otherwise settings.DATASET_PATH.
    """
    path = dataset or settings.DATASET_PATH
    if path is None:
        console.print(
            "[red]No dataset given.[/red] Pass --dataset or set SCHOLAR_CLUSTER_DATASET_PATH."
        )
        raise typer.Exit(code=1)

    path = Path(path)
    if not path.exists():
        console.print(f"[red]Dataset not found:[/red] {path}")
        raise typer.Exit(code=1)
    return path


def fail(exc: Exception) -> typer.Exit:
    """Print a pipeline error; the caller raises the returned Exit."""
    console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
    return typer.Exit(code=1)


def parse_dataset(dataset: Path) -> ParsedCorpus:
    """Parse a dataset without semantic vectors (metadata and citations only)."""
    try:
        return parse_file(dataset, progress_every=settings.PROGRESS_EVERY)
    except (ScholarClusterError, FileNotFoundError) as exc:
        raise fail(exc)
