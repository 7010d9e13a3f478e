"""
Token embeddings from a SentenceTransformer model.

Unlike a word2vec table every token resolves, so titles never fall back
to the zero vector. Vectors are cached per token, up to a fixed size.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import numpy as np
import torch
from sentence_transformers import SentenceTransformer

from scholar_cluster.config.settings import Settings, get_settings
from scholar_cluster.errors import EmbeddingLoadError

DEFAULT_CACHE_SIZE = 10000


class SentenceEmbeddingTable:
    """
    Thin wrapper around SentenceTransformer exposing the word embedding
    table interface (`dimensionality()` / `lookup(token)`).

    Token vectors are kept in an LRU cache of at most `cache_size` entries,
    since query tokens are encoded too.
    """

    def __init__(self, backend: SentenceTransformer, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._backend = backend
        self._dimension = int(backend.get_sentence_embedding_dimension())
        self._encode_cached = lru_cache(maxsize=cache_size)(self._encode)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SentenceEmbeddingTable":
        settings = settings or get_settings()
        device = _resolve_device(settings.EMBEDDING_DEVICE)
        try:
            backend = SentenceTransformer(settings.SENTENCE_MODEL_NAME, device=device)
        except (OSError, ValueError) as exc:
            raise EmbeddingLoadError(
                f"Could not load SentenceTransformer model {settings.SENTENCE_MODEL_NAME!r}: {exc}"
            ) from exc
        return cls(backend, cache_size=settings.EMBEDDING_CACHE_SIZE)

    def dimensionality(self) -> int:
        return self._dimension

    def lookup(self, token: str) -> Optional[np.ndarray]:
        if not token:
            return None
        return self._encode_cached(token)

    def cache_info(self):
        return self._encode_cached.cache_info()

    def _encode(self, token: str) -> np.ndarray:
        return np.asarray(
            self._backend.encode(token, convert_to_numpy=True, show_progress_bar=False),
            dtype=np.float32,
        )


def _resolve_device(raw_device: str) -> str:
    """
    Turn the EMBEDDING_DEVICE setting into an actual device string.

    - "auto"  -> "cuda" if available else "cpu"
    - anything else is passed through as-is.
    """
    if raw_device == "auto":
        return "cuda" if torch.cuda.is_available() else "cpu"
    return raw_device
