# tests/test_citation_graph.py

from scholar_cluster.graph.citation import CitationGraph
from scholar_cluster.models.paper import Paper


def build_toy_graph() -> CitationGraph:
    return CitationGraph.from_mapping(
        {
            "1": ["2", "3"],
            "2": ["3", "999"],
            "3": [],
            "4": ["3", "3"],
        }
    )


def test_nodes_and_edges():
    G = build_toy_graph()

    assert len(G) == 4
    assert set(G.paper_ids()) == {"1", "2", "3", "4"}
    assert "999" not in G
    # duplicate 4 -> 3 collapses into one edge
    assert G.number_of_edges == 4
    assert set(G.edges()) == {("1", "2"), ("1", "3"), ("2", "3"), ("4", "3")}


def test_references_outside_corpus_are_counted():
    G = build_toy_graph()
    assert G.unresolved_references == 1
    assert G.references("2") == {"3"}


def test_reverse_index():
    G = build_toy_graph()

    assert G.citers("3") == {"1", "2", "4"}
    assert G.citers("1") == set()
    assert G.in_degree("3") == 3
    assert G.out_degree("1") == 2
    assert G.out_degree("3") == 0


def test_unknown_paper_queries_are_empty():
    G = build_toy_graph()

    assert G.citers("42") == set()
    assert G.references("42") == set()
    assert G.out_degree("42") == 0
    assert G.in_degree("42") == 0


def test_papers_without_id_are_not_nodes():
    G = CitationGraph.from_papers([Paper(id=None, references=["1"]), Paper(id="1")])

    assert len(G) == 1
    assert G.number_of_edges == 0


def test_as_networkx_returns_copy():
    G = build_toy_graph()
    nxg = G.as_networkx()
    nxg.add_edge("3", "1")

    assert G.number_of_edges == 4
