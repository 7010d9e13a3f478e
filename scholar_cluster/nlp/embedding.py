"""
Word embedding tables.

The semantic encoder only needs two things from an embedding source:

- `dimensionality()` -> width of every vector it hands out
- `lookup(token)`    -> the vector for a token, or None when it has none

`KeyedVectorsTable` serves word2vec model files through gensim.
`SentenceEmbeddingTable` (in `sentence_table`) encodes tokens with a
SentenceTransformer model instead. `load_embedding_table()` picks one
from Settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence, Union

import numpy as np
from gensim.models import KeyedVectors

from scholar_cluster.config.settings import EmbeddingBackend, Settings, get_settings
from scholar_cluster.errors import EmbeddingLoadError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WordEmbeddingTable(Protocol):
    def dimensionality(self) -> int:
        ...

    def lookup(self, token: str) -> Optional[np.ndarray]:
        ...


class KeyedVectorsTable:
    """
    Read-only token -> vector table backed by gensim KeyedVectors.
    """

    def __init__(self, vectors: KeyedVectors) -> None:
        self._vectors = vectors

    # ---- Construction ------------------------------------------------------

    @classmethod
    def load(cls, path: PathLike, binary: Optional[bool] = None) -> "KeyedVectorsTable":
        """
        Load a word2vec model file.

        If `binary` is None the format is guessed from the file suffix
        ('.bin' -> binary, anything else -> text).
        """
        model_path = Path(path)
        if not model_path.is_file():
            raise EmbeddingLoadError(f"Embedding model not found: {model_path}")

        if binary is None:
            binary = model_path.suffix.lower() == ".bin"

        logger.info("Loading word2vec model from %s (binary=%s)", model_path, binary)
        try:
            vectors = KeyedVectors.load_word2vec_format(str(model_path), binary=binary)
        except (OSError, ValueError, EOFError, IndexError) as exc:
            raise EmbeddingLoadError(
                f"Could not read embedding model {model_path}: {exc}"
            ) from exc

        logger.info(
            "Word2vec model loaded: %d tokens, %d dimensions",
            len(vectors.index_to_key),
            vectors.vector_size,
        )
        return cls(vectors)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Sequence[float]],
        vector_size: Optional[int] = None,
    ) -> "KeyedVectorsTable":
        """
        Build a table from an in-memory {token: vector} mapping.

        `vector_size` is required when the mapping is empty.
        """
        keys = list(mapping.keys())
        if not keys:
            if vector_size is None:
                raise ValueError("vector_size is required for an empty mapping")
            return cls(KeyedVectors(vector_size=vector_size))

        weights = np.asarray([mapping[k] for k in keys], dtype=np.float32)
        if weights.ndim != 2:
            raise ValueError("All vectors in the mapping must have the same width")
        if vector_size is not None and weights.shape[1] != vector_size:
            raise ValueError(
                f"Vectors have width {weights.shape[1]}, expected {vector_size}"
            )

        vectors = KeyedVectors(vector_size=weights.shape[1])
        vectors.add_vectors(keys, weights)
        return cls(vectors)

    # ---- Table interface ---------------------------------------------------

    def dimensionality(self) -> int:
        return int(self._vectors.vector_size)

    def lookup(self, token: str) -> Optional[np.ndarray]:
        if token not in self._vectors:
            return None
        return self._vectors[token]

    def __len__(self) -> int:
        return len(self._vectors.index_to_key)


def load_embedding_table(settings: Optional[Settings] = None) -> WordEmbeddingTable:
    """
    Construct the embedding table configured in Settings.

    Raises EmbeddingLoadError when the configured model cannot be loaded.
    """
    settings = settings or get_settings()

    if settings.EMBEDDING_BACKEND == EmbeddingBackend.SENTENCE_TRANSFORMER:
        # Imported lazily: pulls in torch.
        from scholar_cluster.nlp.sentence_table import SentenceEmbeddingTable

        return SentenceEmbeddingTable.from_settings(settings)

    if settings.EMBEDDING_MODEL_PATH is None:
        raise EmbeddingLoadError(
            "No word2vec model configured (set SCHOLAR_CLUSTER_EMBEDDING_MODEL_PATH)."
        )
    return KeyedVectorsTable.load(settings.EMBEDDING_MODEL_PATH, binary=settings.EMBEDDING_BINARY)
