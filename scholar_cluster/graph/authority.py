# scholar_cluster/graph/authority.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from scholar_cluster.graph.citation import CitationGraph
from scholar_cluster.models.paper import Paper
from scholar_cluster.models.weights import DEFAULT_AUTHORITY_SCALE

logger = logging.getLogger(__name__)

DEFAULT_DAMPING = 0.85
DEFAULT_ROUNDS = 1


@dataclass
class AuthorityResult:
    """
    Result of authority propagation.

    `scores` are the raw (pre-scaling) values and sum to 1.0 when dangling
    mass is redistributed. `deltas` holds the L1 change of every round.
    """
    scores: Dict[str, float]
    rounds: int
    scale: float = DEFAULT_AUTHORITY_SCALE
    converged: bool = False
    deltas: List[float] = field(default_factory=list)

    def scaled(self, paper_id: str) -> float:
        return self.scores.get(paper_id, 0.0) * self.scale

    @property
    def total(self) -> float:
        return sum(self.scores.values())


def propagate_round(
    graph: CitationGraph,
    previous: Dict[str, float],
    damping: float = DEFAULT_DAMPING,
    redistribute_dangling: bool = True,
    out_degrees: Optional[Dict[str, int]] = None,
) -> Dict[str, float]:
    """
    One propagation round, computed only from the `previous` snapshot:

        new(p) = (1 - d) / N + d * sum(previous(q) / |refs(q)| for q citing p)

    With `redistribute_dangling`, the mass of papers that cite nothing is
    added back as d * dangling / N to every paper.
    """
    n = len(previous)
    if n == 0:
        return {}

    if out_degrees is None:
        out_degrees = {pid: graph.out_degree(pid) for pid in previous}

    baseline = (1.0 - damping) / n
    if redistribute_dangling:
        dangling = sum(score for pid, score in previous.items() if out_degrees[pid] == 0)
        baseline += damping * dangling / n

    new_scores: Dict[str, float] = {}
    for paper_id in previous:
        inbound = 0.0
        for citer in graph.citers(paper_id):
            inbound += previous[citer] / out_degrees[citer]
        new_scores[paper_id] = baseline + damping * inbound

    return new_scores


def compute_authority(
    graph: CitationGraph,
    rounds: int = DEFAULT_ROUNDS,
    damping: float = DEFAULT_DAMPING,
    tolerance: Optional[float] = None,
    redistribute_dangling: bool = True,
    scale: float = DEFAULT_AUTHORITY_SCALE,
) -> AuthorityResult:
    """
    Run `rounds` propagation rounds from the uniform 1/N start.

    If `tolerance` is given, stop early once the L1 change of a round is
    below it.
    """
    paper_ids = list(graph.paper_ids())
    n = len(paper_ids)
    if n == 0:
        return AuthorityResult(scores={}, rounds=0, scale=scale, converged=True)

    scores = {pid: 1.0 / n for pid in paper_ids}
    out_degrees = {pid: graph.out_degree(pid) for pid in paper_ids}

    deltas: List[float] = []
    converged = False
    for round_no in range(1, rounds + 1):
        new_scores = propagate_round(
            graph,
            scores,
            damping=damping,
            redistribute_dangling=redistribute_dangling,
            out_degrees=out_degrees,
        )
        delta = sum(abs(new_scores[pid] - scores[pid]) for pid in paper_ids)
        deltas.append(delta)
        scores = new_scores
        logger.info("Authority round %d/%d: L1 change %.3e", round_no, rounds, delta)

        if tolerance is not None and delta < tolerance:
            converged = True
            break

    return AuthorityResult(
        scores=scores,
        rounds=len(deltas),
        scale=scale,
        converged=converged,
        deltas=deltas,
    )


def apply_authority(papers: Iterable[Paper], result: AuthorityResult) -> None:
    """
    Store scaled authority on each paper, replacing the 0.0 default. With
    zero rounds every corpus paper gets the uniform start 1/N (scaled).
    Papers the graph does not know (including ones without an id) are left
    untouched.
    """
    for paper in papers:
        if paper.id is not None and paper.id in result.scores:
            paper.authority_score = result.scaled(paper.id)
