# scholar_cluster/nlp/encoder.py

from __future__ import annotations

from typing import List

import numpy as np

from scholar_cluster.nlp.embedding import WordEmbeddingTable


class SemanticEncoder:
    """
    Turn text into a fixed-width vector: the mean of the embedding-table
    vectors of its lower-cased, whitespace-separated tokens.
    """

    def __init__(self, table: WordEmbeddingTable) -> None:
        self._table = table
        self._width = table.dimensionality()

    @property
    def width(self) -> int:
        return self._width

    def encode(self, text: str) -> np.ndarray:
        """
        Encode `text`. Tokens without an entry are skipped; if none
        resolve, the zero vector of the table's width is returned.
        """
        vectors: List[np.ndarray] = []
        for token in (text or "").lower().split():
            vec = self._table.lookup(token)
            if vec is not None:
                vectors.append(np.asarray(vec, dtype=np.float64))

        if not vectors:
            return np.zeros(self._width, dtype=np.float64)

        return np.vstack(vectors).mean(axis=0)


def cosine_similarity(v1, v2) -> float:
    """
    Cosine similarity between two vectors of equal width.

    Returns 0.0 when either vector has zero magnitude.
    """
    v1_arr = np.asarray(v1, dtype=float)
    v2_arr = np.asarray(v2, dtype=float)
    if v1_arr.shape != v2_arr.shape:
        raise ValueError(f"Vector widths differ: {v1_arr.shape} vs {v2_arr.shape}")

    denom = np.linalg.norm(v1_arr) * np.linalg.norm(v2_arr)
    if denom == 0.0 or not np.isfinite(denom):
        return 0.0
    return float(np.dot(v1_arr, v2_arr) / denom)
