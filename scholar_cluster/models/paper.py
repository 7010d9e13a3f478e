# scholar_cluster/models/paper.py

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np


@dataclass
class Paper:
    id: Optional[str]
    title: str = ""
    authors: str = ""
    year: str = ""
    venue: str = ""
    abstract: str = ""

    references: List[str] = field(default_factory=list)

    semantic_vector: Optional[np.ndarray] = None  # mean word vector of the title
    # Scaled score written by apply_authority() when the corpus is built; with
    # zero rounds that is the uniform 1/N start. Records without an id are not
    # in the graph and keep 0.0.
    authority_score: float = 0.0

    @property
    def has_semantic_vector(self) -> bool:
        return self.semantic_vector is not None and len(self.semantic_vector) > 0


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A paper considered for one query, with its fused score and the
    signals it was computed from.
    """
    paper: Paper
    score: float
    lexical_score: float = 0.0
    semantic_score: float = 0.0
    authority: float = 0.0
