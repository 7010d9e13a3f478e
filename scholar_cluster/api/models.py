# scholar_cluster/api/models.py

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from scholar_cluster.models.paper import Paper, ScoredCandidate


class PaperSummary(BaseModel):
    """
    Basic metadata about a paper.
    """
    id: Optional[str] = Field(None, description="Dataset id of the paper.")
    title: str = Field(..., description="Title of the paper.")
    authors: str = Field("", description="Author list as given in the dataset.")
    year: str = Field("", description="Publication year.")
    venue: str = Field("", description="Publication venue.")
    authority: float = Field(..., description="Scaled citation authority.")

    @classmethod
    def from_paper(cls, paper: Paper) -> "PaperSummary":
        return cls(
            id=paper.id,
            title=paper.title,
            authors=paper.authors,
            year=paper.year,
            venue=paper.venue,
            authority=paper.authority_score,
        )


class RankedPaper(PaperSummary):
    """
    A paper returned for a query, with the signals behind its rank.
    """
    score: float = Field(..., description="Fused relevance score.")
    lexical_score: float = Field(..., description="BM25 score from the text index.")
    semantic_score: float = Field(..., description="Cosine similarity to the query.")

    @classmethod
    def from_candidate(cls, candidate: ScoredCandidate) -> "RankedPaper":
        p = candidate.paper
        return cls(
            id=p.id,
            title=p.title,
            authors=p.authors,
            year=p.year,
            venue=p.venue,
            authority=candidate.authority,
            score=candidate.score,
            lexical_score=candidate.lexical_score,
            semantic_score=candidate.semantic_score,
        )


class Cluster(BaseModel):
    index: int = Field(..., description="1-based cluster number in the response.")
    papers: List[RankedPaper] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    top_n: int
    num_clusters: int
    clusters: List[Cluster] = Field(
        default_factory=list,
        description="Clusters of the top-ranked papers; papers keep rank order.",
    )


class PaperDetail(BaseModel):
    """
    Full view of a single paper and its citation neighbourhood.
    """
    paper: PaperSummary
    abstract: str = ""
    references: List[str] = Field(
        default_factory=list,
        description="Ids cited by this paper, as listed in the dataset.",
    )
    cited_by: List[str] = Field(
        default_factory=list,
        description="Ids of corpus papers citing this one.",
    )
