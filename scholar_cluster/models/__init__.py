from .paper import Paper, ScoredCandidate
from .weights import FusionWeights

__all__ = ["Paper", "ScoredCandidate", "FusionWeights"]
