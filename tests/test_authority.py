# tests/test_authority.py

import pytest

from scholar_cluster.graph.authority import apply_authority, compute_authority, propagate_round
from scholar_cluster.graph.citation import CitationGraph
from scholar_cluster.models.paper import Paper


def chain_graph() -> CitationGraph:
    # A cites B, B cites C
    return CitationGraph.from_mapping({"A": ["B"], "B": ["C"], "C": []})


def sample_graph() -> CitationGraph:
    return CitationGraph.from_mapping({"1": ["2", "3"], "2": ["3"], "3": [], "4": ["3"]})


@pytest.mark.parametrize("rounds", [1, 2, 5, 20])
def test_scores_sum_to_one(rounds):
    result = compute_authority(sample_graph(), rounds=rounds)

    assert result.rounds == rounds
    assert result.total == pytest.approx(1.0)


def test_single_round_values():
    result = compute_authority(sample_graph(), rounds=1, damping=0.85)

    assert result.scores["1"] == pytest.approx(0.090625)
    assert result.scores["4"] == pytest.approx(0.090625)
    assert result.scores["2"] == pytest.approx(0.196875)
    assert result.scores["3"] == pytest.approx(0.621875)


def test_chain_rewards_cited_papers():
    result = compute_authority(chain_graph(), rounds=1)
    s = result.scores

    assert s["C"] > 1.0 / 3
    assert s["C"] > s["A"]
    assert s["A"] == pytest.approx(0.05 + 0.85 * (1.0 / 3) / 3)
    assert s["C"] == pytest.approx(s["A"] + 0.85 / 3)


def test_uncited_papers_get_the_baseline_without_redistribution():
    result = compute_authority(chain_graph(), rounds=1, redistribute_dangling=False)
    s = result.scores

    assert s["A"] == pytest.approx(0.15 / 3)
    assert s["B"] == pytest.approx(0.05 + 0.85 / 3)
    assert s["C"] == pytest.approx(0.05 + 0.85 / 3)


def test_zero_rounds_keeps_uniform_start():
    result = compute_authority(sample_graph(), rounds=0)

    assert result.rounds == 0
    assert all(v == pytest.approx(0.25) for v in result.scores.values())


def test_round_reads_only_previous_snapshot():
    G = chain_graph()
    previous = {"A": 0.5, "B": 0.3, "C": 0.2}
    snapshot = dict(previous)

    new = propagate_round(G, previous, damping=0.85, redistribute_dangling=False)

    assert previous == snapshot
    assert new["B"] == pytest.approx(0.05 + 0.85 * 0.5)
    assert new["C"] == pytest.approx(0.05 + 0.85 * 0.3)


def test_tolerance_stops_early():
    result = compute_authority(sample_graph(), rounds=500, tolerance=1e-6)

    assert result.converged
    assert result.rounds < 500
    assert result.deltas[-1] < 1e-6
    assert result.total == pytest.approx(1.0)


def test_empty_graph():
    result = compute_authority(CitationGraph.from_mapping({}), rounds=3)

    assert result.scores == {}
    assert result.rounds == 0
    assert result.converged


def test_apply_authority_scales_scores():
    papers = [Paper(id="A"), Paper(id="B"), Paper(id="C"), Paper(id=None)]
    G = CitationGraph.from_papers(
        [Paper(id="A", references=["B"]), Paper(id="B", references=["C"]), Paper(id="C")]
    )
    result = compute_authority(G, rounds=1, scale=100000.0)

    apply_authority(papers, result)

    assert papers[2].authority_score == pytest.approx(result.scores["C"] * 100000.0)
    assert papers[3].authority_score == 0.0
    assert result.scaled("unknown") == 0.0


def test_apply_authority_with_zero_rounds_gives_uniform_start():
    papers = [Paper(id="A", references=["B"]), Paper(id="B"), Paper(id="C"), Paper(id="D")]
    result = compute_authority(CitationGraph.from_papers(papers), rounds=0, scale=100000.0)

    apply_authority(papers, result)

    assert [p.authority_score for p in papers] == pytest.approx([25000.0] * 4)
    assert Paper(id="E").authority_score == 0.0
