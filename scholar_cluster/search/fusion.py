# scholar_cluster/search/fusion.py

from __future__ import annotations

import logging
from typing import List, Mapping, Protocol, Sequence, Tuple

from scholar_cluster.models.paper import Paper, ScoredCandidate
from scholar_cluster.models.weights import FusionWeights
from scholar_cluster.nlp.encoder import SemanticEncoder, cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_OVERFETCH_FACTOR = 10


class LexicalIndex(Protocol):
    def search(self, query: str, limit: int) -> Sequence[Tuple[str, float]]:
        ...


class RankingFusion:
    """
    Rank papers for a query by a weighted sum of three signals:

    - the lexical (BM25) score from the text index,
    - cosine similarity between the paper's and the query's semantic vectors,
    - the paper's citation authority, descaled by `weights.authority_scale`.
    """

    def __init__(
        self,
        papers: Mapping[str, Paper],
        index: LexicalIndex,
        encoder: SemanticEncoder,
        weights: FusionWeights = FusionWeights(),
        overfetch_factor: int = DEFAULT_OVERFETCH_FACTOR,
    ) -> None:
        if overfetch_factor < 1:
            raise ValueError("overfetch_factor must be >= 1")
        self._papers = papers
        self._index = index
        self._encoder = encoder
        self.weights = weights
        self.overfetch_factor = overfetch_factor

    def search(self, query_text: str, top_n: int) -> List[ScoredCandidate]:
        """
        Score every lexical hit and return them best first (stable on ties).

        Fetches `top_n * overfetch_factor` hits from the index. Hits whose
        paper is unknown or has no semantic vector are dropped. Propagates
        QuerySyntaxError / IndexUnavailableError from the index.
        """
        if top_n < 1:
            raise ValueError("top_n must be >= 1")

        query_vector = self._encoder.encode(query_text)
        hits = self._index.search(query_text, top_n * self.overfetch_factor)
        logger.debug("Lexical search for %r returned %d hits", query_text, len(hits))

        candidates: List[ScoredCandidate] = []
        for paper_id, lexical_score in hits:
            paper = self._papers.get(paper_id)
            if paper is None or not paper.has_semantic_vector:
                continue

            semantic_score = cosine_similarity(paper.semantic_vector, query_vector)
            combined = self.weights.combine(lexical_score, semantic_score, paper.authority_score)
            candidates.append(
                ScoredCandidate(
                    paper=paper,
                    score=combined,
                    lexical_score=float(lexical_score),
                    semantic_score=semantic_score,
                    authority=paper.authority_score,
                )
            )

        # sorted() is stable, so equal scores keep lexical-hit order.
        return sorted(candidates, key=lambda c: c.score, reverse=True)
