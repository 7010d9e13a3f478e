"""
Grouping ranked candidates into topical clusters.

Each selected candidate becomes one feature vector: its semantic vector
with the fused score appended as a last dimension, so clusters separate
papers by topic and by relevance tier. The partition itself is delegated
to a clustering engine; `KMeansClusteringEngine` uses scikit-learn's
k-means with k-means++ seeding.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Union

import numpy as np
from sklearn.cluster import KMeans

from scholar_cluster.errors import ClusteringError
from scholar_cluster.models.paper import Paper, ScoredCandidate

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


class ClusteringEngine(Protocol):
    def partition(self, vectors: np.ndarray, k: int, max_iterations: int) -> Sequence[int]:
        ...


class KMeansClusteringEngine:
    """
    k-means (k-means++ init) over the rows of `vectors`.

    Cluster ids are only reproducible across runs when `random_state` is set.
    scikit-learn rejects k < 1 and k > number of vectors; both surface as
    ClusteringError.
    """

    def __init__(self, random_state: Optional[int] = None, n_init: Union[int, str] = "auto") -> None:
        self.random_state = random_state
        self.n_init = n_init

    def partition(self, vectors: np.ndarray, k: int, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> List[int]:
        X = np.asarray(vectors, dtype=float)
        km = KMeans(
            n_clusters=k,
            init="k-means++",
            max_iter=max_iterations,
            n_init=self.n_init,
            random_state=self.random_state,
        )
        try:
            labels = km.fit_predict(X)
        except ValueError as exc:
            raise ClusteringError(f"k-means could not build {k} clusters: {exc}") from exc
        return [int(label) for label in labels]


def build_feature_vectors(
    candidates: Sequence[ScoredCandidate],
    top_n: int,
) -> Tuple[List[ScoredCandidate], np.ndarray]:
    """
    Take the first min(top_n, len(candidates)) candidates and build one
    row per candidate: semantic vector + [fused score].
    """
    selected = list(candidates[:max(top_n, 0)])
    if not selected:
        return [], np.empty((0, 0), dtype=float)

    rows = [
        np.append(np.asarray(c.paper.semantic_vector, dtype=float), c.score)
        for c in selected
    ]
    return selected, np.vstack(rows)


class ClusterInputBuilder:
    def __init__(self, engine: ClusteringEngine, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> None:
        self.engine = engine
        self.max_iterations = max_iterations

    def cluster_candidates(
        self,
        candidates: Sequence[ScoredCandidate],
        top_n: int,
        num_clusters: int,
    ) -> List[List[ScoredCandidate]]:
        """
        Partition the top `top_n` candidates into `num_clusters` groups.

        Clusters come back in ascending cluster-id order with empty ones
        left out; candidates inside a cluster keep their rank order. No
        candidates means no clusters (the engine is not called).
        """
        selected, vectors = build_feature_vectors(candidates, top_n)
        if not selected:
            return []

        logger.debug("Clustering %d candidates into %d groups", len(selected), num_clusters)
        assignment = list(self.engine.partition(vectors, num_clusters, self.max_iterations))

        if len(assignment) != len(selected):
            raise ClusteringError(
                f"Clustering engine returned {len(assignment)} labels for {len(selected)} vectors"
            )

        groups: Dict[int, List[ScoredCandidate]] = {}
        for candidate, label in zip(selected, assignment):
            if not 0 <= label < num_clusters:
                raise ClusteringError(f"Cluster id {label} outside [0, {num_clusters})")
            groups.setdefault(label, []).append(candidate)

        return [groups[label] for label in sorted(groups)]

    def cluster(
        self,
        candidates: Sequence[ScoredCandidate],
        top_n: int,
        num_clusters: int,
    ) -> List[List[Paper]]:
        """Same as `cluster_candidates`, returning the papers only."""
        return [
            [c.paper for c in group]
            for group in self.cluster_candidates(candidates, top_n, num_clusters)
        ]
