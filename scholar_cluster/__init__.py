"""
scholar_cluster - citation-aware semantic search and clustering of papers.

- Parsing citation-network dumps into papers and a citation graph
- Authority scores propagated over the citation graph
- Title embeddings from a word embedding table
- BM25 lexical search fused with semantic similarity and authority
- k-means clustering of the top-ranked papers
"""

from scholar_cluster.errors import (
    ClusteringError,
    EmbeddingLoadError,
    IndexUnavailableError,
    ParseError,
    QuerySyntaxError,
    ScholarClusterError,
)
from scholar_cluster.models import FusionWeights, Paper, ScoredCandidate

__version__ = "0.1.0"

__all__ = [
    "ClusteringError",
    "EmbeddingLoadError",
    "FusionWeights",
    "IndexUnavailableError",
    "Paper",
    "ParseError",
    "QuerySyntaxError",
    "ScholarClusterError",
    "ScoredCandidate",
]
