# tests/test_fusion.py

from typing import List, Tuple

import numpy as np
import pytest

from scholar_cluster.errors import QuerySyntaxError
from scholar_cluster.models.paper import Paper
from scholar_cluster.models.weights import FusionWeights
from scholar_cluster.search.fusion import RankingFusion


class StubIndex:
    """Returns canned (id, score) hits and records the requested limit."""

    def __init__(self, hits: List[Tuple[str, float]]):
        self.hits = hits
        self.limits: List[int] = []

    def search(self, query: str, limit: int):
        self.limits.append(limit)
        return self.hits[:limit]


class RaisingIndex:
    def search(self, query: str, limit: int):
        raise QuerySyntaxError(query, "boom")


def build_papers():
    return {
        "a": Paper(id="a", title="Neural Networks", semantic_vector=np.array([0.95, 0.05, 0.0]), authority_score=20000.0),
        "b": Paper(id="b", title="Graph Mining", semantic_vector=np.array([0.0, 0.9, 0.1]), authority_score=50000.0),
        "c": Paper(id="c", title="Unknown Words", semantic_vector=np.zeros(3), authority_score=0.0),
        "d": Paper(id="d", title="No Abstract", semantic_vector=None, authority_score=90000.0),
    }


def test_combined_score_formula(encoder):
    papers = build_papers()
    index = StubIndex([("a", 2.0), ("b", 1.0)])
    fusion = RankingFusion(papers, index, encoder)

    results = fusion.search("neural networks", 5)
    by_id = {c.paper.id: c for c in results}

    query_vec = encoder.encode("neural networks")
    cos_a = float(
        np.dot(papers["a"].semantic_vector, query_vec)
        / (np.linalg.norm(papers["a"].semantic_vector) * np.linalg.norm(query_vec))
    )
    assert by_id["a"].semantic_score == pytest.approx(cos_a)
    assert by_id["a"].score == pytest.approx(0.5 * 2.0 + 0.2 * cos_a + 0.3 * 0.2)
    assert by_id["a"].lexical_score == 2.0
    assert by_id["a"].authority == 20000.0


def test_results_sorted_best_first(encoder):
    index = StubIndex([("b", 1.0), ("a", 2.0)])
    results = RankingFusion(build_papers(), index, encoder).search("neural", 5)

    scores = [c.score for c in results]
    assert scores == sorted(scores, reverse=True)
    assert results[0].paper.id == "a"


def test_overfetch_limit(encoder):
    index = StubIndex([])
    RankingFusion(build_papers(), index, encoder, overfetch_factor=10).search("x", 3)
    assert index.limits == [30]


def test_unknown_ids_and_missing_vectors_are_dropped(encoder):
    index = StubIndex([("zzz", 5.0), ("d", 4.0), ("c", 1.0)])
    results = RankingFusion(build_papers(), index, encoder).search("neural", 5)

    assert [c.paper.id for c in results] == ["c"]
    # zero vector: cosine contributes nothing
    assert results[0].semantic_score == 0.0
    assert results[0].score == pytest.approx(0.5)


def test_no_hits(encoder):
    assert RankingFusion(build_papers(), StubIndex([]), encoder).search("neural", 5) == []


def test_equal_scores_keep_hit_order(encoder):
    papers = {
        pid: Paper(id=pid, semantic_vector=np.zeros(3), authority_score=0.0)
        for pid in ["x", "y", "z"]
    }
    index = StubIndex([("y", 1.0), ("x", 1.0), ("z", 1.0)])
    fusion = RankingFusion(papers, index, encoder)

    first = [c.paper.id for c in fusion.search("q", 5)]
    second = [c.paper.id for c in fusion.search("q", 5)]
    assert first == second == ["y", "x", "z"]


def test_custom_weights(encoder):
    weights = FusionWeights(lexical=0.0, semantic=0.0, authority=1.0, authority_scale=100000.0)
    index = StubIndex([("a", 9.0), ("b", 0.1)])
    results = RankingFusion(build_papers(), index, encoder, weights=weights).search("neural", 5)

    assert [c.paper.id for c in results] == ["b", "a"]
    assert results[0].score == pytest.approx(0.5)


def test_index_errors_propagate(encoder):
    fusion = RankingFusion(build_papers(), RaisingIndex(), encoder)
    with pytest.raises(QuerySyntaxError):
        fusion.search("neural", 5)


def test_invalid_arguments(encoder):
    with pytest.raises(ValueError):
        RankingFusion(build_papers(), StubIndex([]), encoder).search("neural", 0)
    with pytest.raises(ValueError):
        RankingFusion(build_papers(), StubIndex([]), encoder, overfetch_factor=0)
