"""
End-to-end search pipeline.

Startup (single-threaded, once):
    dataset lines -> Papers (+ title vectors) -> citation graph
    -> authority scores -> text index

Queries (read-only, may run concurrently):
    query -> RankingFusion -> top-N -> ClusterInputBuilder -> clusters

`SearchPipeline.semantic_search_with_clustering()` is the query entry point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from scholar_cluster.config.settings import Settings, get_settings
from scholar_cluster.graph.authority import AuthorityResult, apply_authority, compute_authority
from scholar_cluster.graph.citation import CitationGraph
from scholar_cluster.index.text_index import IndexDocument, TextIndex
from scholar_cluster.models.paper import Paper, ScoredCandidate
from scholar_cluster.models.weights import FusionWeights
from scholar_cluster.nlp.embedding import KeyedVectorsTable, WordEmbeddingTable, load_embedding_table
from scholar_cluster.nlp.encoder import SemanticEncoder
from scholar_cluster.parsing.corpus_parser import ParsedCorpus, parse_file, parse_lines
from scholar_cluster.search.clustering import ClusterInputBuilder, ClusteringEngine, KMeansClusteringEngine
from scholar_cluster.search.fusion import RankingFusion

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# -----------------------------------------------------------------------------
# Corpus
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Corpus:
    """
    Immutable result of ingestion, shared by every query.

    - papers: id -> Paper (read-only view)
    - anonymous: records that had no id; kept, but never indexed or scored
    - graph: citations between corpus papers
    - authority: raw authority scores and propagation diagnostics
    """
    papers: Mapping[str, Paper]
    anonymous: Tuple[Paper, ...]
    graph: CitationGraph
    authority: AuthorityResult

    @classmethod
    def build(
        cls,
        parsed: ParsedCorpus,
        settings: Optional[Settings] = None,
    ) -> "Corpus":
        settings = settings or get_settings()

        graph = CitationGraph.from_papers(parsed.papers.values())
        logger.info(
            "Citation graph: %d papers, %d edges, %d references outside the corpus",
            len(graph),
            graph.number_of_edges,
            graph.unresolved_references,
        )

        authority = compute_authority(
            graph,
            rounds=settings.AUTHORITY_ROUNDS,
            damping=settings.DAMPING_FACTOR,
            tolerance=settings.AUTHORITY_TOLERANCE,
            redistribute_dangling=settings.REDISTRIBUTE_DANGLING,
            scale=settings.AUTHORITY_SCALE,
        )
        apply_authority(parsed.papers.values(), authority)
        logger.info("Authority computed in %d round(s)", authority.rounds)

        return cls(
            papers=MappingProxyType(dict(parsed.papers)),
            anonymous=tuple(parsed.anonymous),
            graph=graph,
            authority=authority,
        )

    def __len__(self) -> int:
        return len(self.papers)

    def get(self, paper_id: str) -> Optional[Paper]:
        return self.papers.get(paper_id)

    def documents(self) -> Iterator[IndexDocument]:
        for paper in self.papers.values():
            yield IndexDocument(
                id=paper.id,
                title=paper.title,
                abstract=paper.abstract,
                authors=paper.authors,
                year=paper.year,
                venue=paper.venue,
            )

    def top_by_authority(self, limit: int = 10) -> List[Paper]:
        ranked = sorted(self.papers.values(), key=lambda p: p.authority_score, reverse=True)
        return ranked[:limit]


# -----------------------------------------------------------------------------
# Pipeline
# -----------------------------------------------------------------------------

class SearchPipeline:
    def __init__(
        self,
        corpus: Corpus,
        index: TextIndex,
        encoder: SemanticEncoder,
        engine: Optional[ClusteringEngine] = None,
        weights: FusionWeights = FusionWeights(),
        overfetch_factor: int = 10,
        cluster_max_iterations: int = 100,
    ) -> None:
        self.corpus = corpus
        self.index = index
        self.encoder = encoder
        self.fusion = RankingFusion(
            corpus.papers,
            index,
            encoder,
            weights=weights,
            overfetch_factor=overfetch_factor,
        )
        self.clusterer = ClusterInputBuilder(
            engine or KMeansClusteringEngine(),
            max_iterations=cluster_max_iterations,
        )

    # ---- Construction ------------------------------------------------------

    @classmethod
    def from_parsed(
        cls,
        parsed: ParsedCorpus,
        encoder: SemanticEncoder,
        settings: Optional[Settings] = None,
        engine: Optional[ClusteringEngine] = None,
        index: Optional[TextIndex] = None,
    ) -> "SearchPipeline":
        settings = settings or get_settings()
        corpus = Corpus.build(parsed, settings=settings)

        if index is None:
            index = TextIndex().index(corpus.documents())

        if engine is None:
            engine = KMeansClusteringEngine(random_state=settings.CLUSTER_RANDOM_STATE)

        return cls(
            corpus,
            index,
            encoder,
            engine=engine,
            weights=settings.fusion_weights,
            overfetch_factor=settings.OVERFETCH_FACTOR,
            cluster_max_iterations=settings.CLUSTER_MAX_ITERATIONS,
        )

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        table: WordEmbeddingTable,
        settings: Optional[Settings] = None,
        engine: Optional[ClusteringEngine] = None,
    ) -> "SearchPipeline":
        settings = settings or get_settings()
        encoder = SemanticEncoder(table)
        parsed = parse_lines(lines, encoder, progress_every=settings.PROGRESS_EVERY)
        return cls.from_parsed(parsed, encoder, settings=settings, engine=engine)

    @classmethod
    def from_files(
        cls,
        dataset_path: PathLike,
        embedding_path: Optional[PathLike] = None,
        binary: Optional[bool] = None,
        settings: Optional[Settings] = None,
        engine: Optional[ClusteringEngine] = None,
    ) -> "SearchPipeline":
        """
        Build a pipeline from a dataset file.

        If `embedding_path` is None the embedding table configured in
        Settings is used. Loading errors (ParseError, EmbeddingLoadError,
        FileNotFoundError) abort construction.
        """
        settings = settings or get_settings()

        if embedding_path is not None:
            table: WordEmbeddingTable = KeyedVectorsTable.load(embedding_path, binary=binary)
        else:
            table = load_embedding_table(settings)

        encoder = SemanticEncoder(table)
        parsed = parse_file(dataset_path, encoder, progress_every=settings.PROGRESS_EVERY)
        return cls.from_parsed(parsed, encoder, settings=settings, engine=engine)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SearchPipeline":
        settings = settings or get_settings()
        if settings.DATASET_PATH is None:
            raise FileNotFoundError(
                "No dataset configured (set SCHOLAR_CLUSTER_DATASET_PATH)."
            )
        return cls.from_files(settings.DATASET_PATH, settings=settings)

    # ---- Queries -----------------------------------------------------------

    def search(self, query_text: str, top_n: int) -> List[ScoredCandidate]:
        """Fused ranking of every lexical hit, best first."""
        return self.fusion.search(query_text, top_n)

    def clustered_candidates(
        self,
        query_text: str,
        top_n: int,
        num_clusters: int,
    ) -> List[List[ScoredCandidate]]:
        candidates = self.fusion.search(query_text, top_n)
        clusters = self.clusterer.cluster_candidates(candidates, top_n, num_clusters)
        logger.info(
            "Query %r: %d candidates, %d cluster(s)",
            query_text,
            min(top_n, len(candidates)),
            len(clusters),
        )
        return clusters

    def semantic_search_with_clustering(
        self,
        query_text: str,
        top_n: int,
        num_clusters: int,
    ) -> List[List[Paper]]:
        """
        Rank papers for `query_text`, keep the best `top_n`, and group
        them into `num_clusters` clusters of Papers.
        """
        return [
            [c.paper for c in group]
            for group in self.clustered_candidates(query_text, top_n, num_clusters)
        ]
