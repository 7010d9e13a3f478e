# scholar_cluster/cli/query_cli.py

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from scholar_cluster.cli.common import console, fail, parse_dataset, resolve_dataset, truncate_abstract
from scholar_cluster.config.settings import settings
from scholar_cluster.errors import ScholarClusterError
from scholar_cluster.index.storage import load_index
from scholar_cluster.models.paper import ScoredCandidate
from scholar_cluster.nlp.embedding import KeyedVectorsTable, WordEmbeddingTable, load_embedding_table
from scholar_cluster.nlp.encoder import SemanticEncoder
from scholar_cluster.parsing.corpus_parser import parse_file
from scholar_cluster.pipeline import Corpus, SearchPipeline

app = typer.Typer(
    help="Search a citation dataset and inspect single papers."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_pipeline(
    dataset: Path,
    embeddings: Optional[Path],
    binary: Optional[bool],
    index_file: Optional[Path],
) -> SearchPipeline:
    """
    Load embeddings, parse the dataset and build (or load) the text index.
    """
    if embeddings is not None:
        table: WordEmbeddingTable = KeyedVectorsTable.load(embeddings, binary=binary)
    else:
        table = load_embedding_table(settings)

    encoder = SemanticEncoder(table)
    parsed = parse_file(dataset, encoder, progress_every=settings.PROGRESS_EVERY)
    index = load_index(index_file) if index_file is not None else None
    return SearchPipeline.from_parsed(parsed, encoder, settings=settings, index=index)


def _print_clusters(
    query: str,
    clusters: List[List[ScoredCandidate]],
    show_abstracts: bool,
) -> None:
    console.rule(f"[bold]Clustered results for '{query}'[/bold]")

    for cluster_no, group in enumerate(clusters, start=1):
        tbl = Table(title=f"Cluster #{cluster_no}", show_header=True, header_style="bold")
        tbl.add_column("#", justify="right")
        tbl.add_column("Title")
        tbl.add_column("Authors")
        tbl.add_column("Year")
        tbl.add_column("Venue")
        tbl.add_column("Authority", justify="right")
        tbl.add_column("Score", justify="right")

        for rank, c in enumerate(group, start=1):
            p = c.paper
            tbl.add_row(
                str(rank),
                p.title or "(no title)",
                p.authors,
                p.year,
                p.venue,
                f"{c.authority:.3f}",
                f"{c.score:.4f}",
            )
        console.print(tbl)

        if show_abstracts:
            for c in group:
                if c.paper.abstract:
                    console.print(f"[bold]{c.paper.title}[/bold]")
                    console.print(f"  [dim]{truncate_abstract(c.paper.abstract)}[/dim]")

    console.print(f"\n[bold]Total clusters:[/bold] {len(clusters)}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("search")
def search(
    query: str = typer.Argument(
        ..., help="Free-text query (supports \"phrases\", +required, -excluded, field:term)."
    ),
    dataset: Optional[Path] = typer.Option(
        None,
        "--dataset",
        "-d",
        help="Citation dataset file. Defaults to settings.DATASET_PATH.",
    ),
    embeddings: Optional[Path] = typer.Option(
        None,
        "--embeddings",
        "-e",
        help="word2vec model file. If omitted, the embedding table from settings is used.",
    ),
    binary: Optional[bool] = typer.Option(
        None,
        "--binary/--text",
        help="Force the word2vec file format (default: guess from the '.bin' suffix).",
    ),
    index_file: Optional[Path] = typer.Option(
        None,
        "--index",
        "-i",
        help="Saved text index to use instead of indexing the dataset again.",
    ),
    top_n: int = typer.Option(
        settings.DEFAULT_TOP_N,
        "--top-n",
        "-n",
        min=1,
        help="Number of ranked papers to cluster.",
    ),
    clusters: int = typer.Option(
        settings.DEFAULT_NUM_CLUSTERS,
        "--clusters",
        "-k",
        min=1,
        help="Number of clusters to build.",
    ),
    show_abstracts: bool = typer.Option(
        False,
        "--abstracts",
        help="Also print a short preview of each abstract.",
    ),
) -> None:
    """
    Rank papers for QUERY and print them grouped into clusters.
    """
    dataset_path = resolve_dataset(dataset)

    try:
        with console.status("Building search pipeline..."):
            pipeline = _build_pipeline(dataset_path, embeddings, binary, index_file)
        results = pipeline.clustered_candidates(query, top_n, clusters)
    except (ScholarClusterError, FileNotFoundError) as exc:
        raise fail(exc)

    if not results:
        console.print(f"[yellow]No matches for '{query}'.[/yellow]")
        return

    _print_clusters(query, results, show_abstracts)


@app.command("paper")
def paper(
    paper_id: str = typer.Argument(..., help="Paper id (the dataset's #index value)."),
    dataset: Optional[Path] = typer.Option(
        None,
        "--dataset",
        "-d",
        help="Citation dataset file. Defaults to settings.DATASET_PATH.",
    ),
) -> None:
    """
    Show metadata, citations and authority for a single paper.
    """
    corpus = Corpus.build(parse_dataset(resolve_dataset(dataset)), settings=settings)

    p = corpus.get(paper_id)
    if p is None:
        console.print(f"[red]Paper '{paper_id}' not found in dataset.[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]Paper {p.id}[/bold]: {p.title or '(no title)'}")
    console.print(f"Authors: {p.authors or '-'}")
    console.print(f"Year: {p.year or '-'}    Venue: {p.venue or '-'}")
    console.print(f"Authority: {p.authority_score:.3f}")
    if p.abstract:
        console.print(f"[dim]{truncate_abstract(p.abstract)}[/dim]")

    def _print_neighbors(header: str, ids: List[str]) -> None:
        console.print(f"\n[bold]{header}[/bold]")
        if not ids:
            console.print("  (none)")
            return
        for nid in ids:
            other = corpus.get(nid)
            title = other.title if other is not None else ""
            title_part = f" - {title}" if title else ""
            console.print(f"  • {nid}{title_part}")

    _print_neighbors("References (in corpus):", sorted(corpus.graph.references(paper_id)))
    _print_neighbors("Cited by:", sorted(corpus.graph.citers(paper_id)))
