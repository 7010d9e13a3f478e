# scholar_cluster/models/weights.py

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_AUTHORITY_SCALE = 100000.0


@dataclass(frozen=True)
class FusionWeights:
    """
    Weights of the three relevance signals in the combined score:

        combined = lexical * bm25 + semantic * cosine + authority * (authority_score / authority_scale)

    `authority_scale` must match the scale the authority scorer stored
    scores with.
    """
    lexical: float = 0.5
    semantic: float = 0.2
    authority: float = 0.3
    authority_scale: float = DEFAULT_AUTHORITY_SCALE

    def combine(self, lexical_score: float, semantic_score: float, authority_score: float) -> float:
        return (
            self.lexical * lexical_score
            + self.semantic * semantic_score
            + self.authority * (authority_score / self.authority_scale)
        )
