# scholar_cluster/graph/citation.py

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Set

import networkx as nx

from scholar_cluster.models.paper import Paper


class CitationGraph:
    """
    Read-only "paper cites paper" graph over the papers of one corpus.

    Backed by a networkx DiGraph, so repeated references collapse into a
    single edge and the reverse index (who cites a paper) is simply the
    node's predecessors. References to ids outside the corpus are not
    kept as edges; they are counted in `unresolved_references`.
    """

    def __init__(self, graph: nx.DiGraph, unresolved_references: int = 0) -> None:
        self._graph = graph
        self.unresolved_references = unresolved_references

    @classmethod
    def from_papers(cls, papers: Iterable[Paper]) -> "CitationGraph":
        papers = [p for p in papers if p.id is not None]
        known: Set[str] = {p.id for p in papers}  # type: ignore[misc]

        G = nx.DiGraph()
        G.add_nodes_from(known)

        unresolved = 0
        for paper in papers:
            for cited_id in paper.references:
                if cited_id in known:
                    G.add_edge(paper.id, cited_id)
                else:
                    unresolved += 1

        return cls(G, unresolved_references=unresolved)

    @classmethod
    def from_mapping(cls, citation_map: Dict[str, Iterable[str]]) -> "CitationGraph":
        """
        Build from a plain {paper_id: cited ids} mapping. Every key is a
        corpus paper; ids that only appear as values are outside it.
        """
        papers = [Paper(id=pid, references=list(refs)) for pid, refs in citation_map.items()]
        return cls.from_papers(papers)

    # ---- Queries -----------------------------------------------------------

    def __contains__(self, paper_id: object) -> bool:
        return paper_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def paper_ids(self) -> Iterator[str]:
        return iter(self._graph.nodes)

    def references(self, paper_id: str) -> Set[str]:
        """Ids cited by `paper_id`; empty for unknown papers."""
        if paper_id not in self._graph:
            return set()
        return set(self._graph.successors(paper_id))

    def citers(self, paper_id: str) -> Set[str]:
        """Ids of corpus papers that cite `paper_id`."""
        if paper_id not in self._graph:
            return set()
        return set(self._graph.predecessors(paper_id))

    def out_degree(self, paper_id: str) -> int:
        if paper_id not in self._graph:
            return 0
        return int(self._graph.out_degree(paper_id))

    def in_degree(self, paper_id: str) -> int:
        if paper_id not in self._graph:
            return 0
        return int(self._graph.in_degree(paper_id))

    def edges(self) -> List[tuple]:
        return list(self._graph.edges())

    @property
    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def as_networkx(self) -> nx.DiGraph:
        """A copy of the underlying graph, safe to mutate."""
        return self._graph.copy()
