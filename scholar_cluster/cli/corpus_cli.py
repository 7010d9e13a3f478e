# scholar_cluster/cli/corpus_cli.py

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from scholar_cluster.cli.common import console, fail, parse_dataset, resolve_dataset
from scholar_cluster.config.settings import settings
from scholar_cluster.index.storage import save_index
from scholar_cluster.index.text_index import TextIndex
from scholar_cluster.pipeline import Corpus

app = typer.Typer(help="Dataset utilities: build a reusable index, print statistics.")


@app.command("index")
def build_index(
    dataset: Optional[Path] = typer.Argument(
        None, help="Citation dataset file. Defaults to settings.DATASET_PATH."
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the index. Defaults to settings.index_dir/<dataset name>.pkl.",
    ),
    overwrite: bool = typer.Option(
        True,
        "--overwrite/--no-overwrite",
        help="Replace an existing index file.",
    ),
) -> None:
    """
    Parse DATASET and save its text index for later `query search --index` runs.
    """
    dataset_path = resolve_dataset(dataset)
    parsed = parse_dataset(dataset_path)

    index = TextIndex().index(Corpus.build(parsed, settings=settings).documents())
    target = output or settings.index_dir / dataset_path.stem

    try:
        path = save_index(index, target, overwrite=overwrite)
    except FileExistsError as exc:
        raise fail(exc)

    console.print(
        f"[green]Indexed {len(index)} papers. Index saved to: [bold]{path}[/bold][/green]"
    )


@app.command("stats")
def stats(
    dataset: Optional[Path] = typer.Argument(
        None, help="Citation dataset file. Defaults to settings.DATASET_PATH."
    ),
    top_k: int = typer.Option(
        10,
        "--top-k",
        "-k",
        min=1,
        help="Number of papers to list by authority.",
    ),
) -> None:
    """
    Print corpus size, citation counts and the most authoritative papers.
    """
    corpus = Corpus.build(parse_dataset(resolve_dataset(dataset)), settings=settings)

    console.print(f"[bold]Papers:[/bold] {len(corpus)}")
    console.print(f"[bold]Records without id:[/bold] {len(corpus.anonymous)}")
    console.print(f"[bold]Citation edges:[/bold] {corpus.graph.number_of_edges}")
    console.print(
        f"[bold]References outside the corpus:[/bold] {corpus.graph.unresolved_references}"
    )
    console.print(f"[bold]Authority rounds:[/bold] {corpus.authority.rounds}")

    if len(corpus) == 0:
        return

    tbl = Table(title=f"Top {top_k} papers by authority", show_header=True, header_style="bold")
    tbl.add_column("Id")
    tbl.add_column("Title")
    tbl.add_column("Cited by", justify="right")
    tbl.add_column("Authority", justify="right")

    for p in corpus.top_by_authority(top_k):
        tbl.add_row(
            str(p.id),
            p.title,
            str(corpus.graph.in_degree(p.id)),
            f"{p.authority_score:.3f}",
        )

    console.print(tbl)
