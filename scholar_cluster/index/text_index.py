"""
In-memory lexical index over paper metadata, scored with BM25.

`TextIndex.index(documents)` analyzes every searchable field once and
builds one `rank_bm25.BM25Okapi` model per field. `search(query, limit)`
parses the query (see `scholar_cluster.index.query`), keeps documents
that satisfy its clauses, and scores them by summing the BM25 score of
each positive clause in its field.

After `index()` the object is only read, so concurrent searches are safe.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np
from rank_bm25 import BM25Okapi

from scholar_cluster.errors import IndexUnavailableError
from scholar_cluster.index.analysis import analyze
from scholar_cluster.index.query import SEARCHABLE_FIELDS, Clause, Occur, parse_query

logger = logging.getLogger(__name__)

BM25_K1 = 1.5
BM25_B = 0.75


class IndexDocument(NamedTuple):
    id: Optional[str]
    title: Optional[str] = ""
    abstract: Optional[str] = ""
    authors: Optional[str] = ""
    year: Optional[str] = ""
    venue: Optional[str] = ""


def _contains_phrase(tokens: Sequence[str], phrase: Sequence[str]) -> bool:
    width = len(phrase)
    if width == 0 or width > len(tokens):
        return False
    first = phrase[0]
    for start in range(len(tokens) - width + 1):
        if tokens[start] == first and tuple(tokens[start:start + width]) == tuple(phrase):
            return True
    return False


class TextIndex:
    def __init__(self, k1: float = BM25_K1, b: float = BM25_B) -> None:
        self.k1 = k1
        self.b = b
        self._ids: List[str] = []
        self._tokens: Dict[str, List[List[str]]] = {}
        self._token_sets: Dict[str, List[Set[str]]] = {}
        self._bm25: Dict[str, Optional[BM25Okapi]] = {}
        self._built = False
        self._closed = False

    # ---- Building ----------------------------------------------------------

    def index(self, documents: Iterable[IndexDocument]) -> "TextIndex":
        """
        Build the index. Documents without an id are skipped; missing
        fields are indexed as empty strings.
        """
        ids: List[str] = []
        tokens: Dict[str, List[List[str]]] = {f: [] for f in SEARCHABLE_FIELDS}

        skipped = 0
        for doc in documents:
            doc = IndexDocument(*doc)
            if doc.id is None:
                skipped += 1
                continue
            ids.append(doc.id)
            for field in SEARCHABLE_FIELDS:
                tokens[field].append(analyze(getattr(doc, field) or ""))

        self._ids = ids
        self._tokens = tokens
        self._token_sets = {f: [set(t) for t in toks] for f, toks in tokens.items()}
        self._bm25 = {
            f: (BM25Okapi(toks, k1=self.k1, b=self.b) if any(toks) else None)
            for f, toks in tokens.items()
        }
        self._built = True
        self._closed = False

        if skipped:
            logger.info("Skipped %d documents without an id", skipped)
        logger.info("Text index built with %d documents", len(ids))
        return self

    def close(self) -> None:
        self._closed = True

    @property
    def is_open(self) -> bool:
        return self._built and not self._closed

    def __len__(self) -> int:
        return len(self._ids)

    # ---- Searching ---------------------------------------------------------

    def _clause_mask(self, clause: Clause) -> np.ndarray:
        if clause.phrase:
            field_tokens = self._tokens[clause.field]
            return np.fromiter(
                (_contains_phrase(toks, clause.terms) for toks in field_tokens),
                dtype=bool,
                count=len(field_tokens),
            )
        field_sets = self._token_sets[clause.field]
        terms = set(clause.terms)
        return np.fromiter(
            (not terms.isdisjoint(s) for s in field_sets),
            dtype=bool,
            count=len(field_sets),
        )

    def search(self, query: str, limit: int) -> List[Tuple[str, float]]:
        """
        Return up to `limit` (id, score) pairs, best first; ties keep
        indexing order.

        Raises QuerySyntaxError for malformed queries and
        IndexUnavailableError if the index is not built or closed.
        """
        if not self.is_open:
            raise IndexUnavailableError("Text index is not open for reading")

        clauses = parse_query(query)
        if not clauses or not self._ids or limit <= 0:
            return []

        n = len(self._ids)
        required = np.ones(n, dtype=bool)
        any_should = np.zeros(n, dtype=bool)
        has_must = False
        has_should = False
        scores = np.zeros(n, dtype=float)

        positive: List[Tuple[Clause, np.ndarray]] = []
        for clause in clauses:
            mask = self._clause_mask(clause)
            if clause.occur == Occur.MUST_NOT:
                required &= ~mask
                continue
            if clause.occur == Occur.MUST:
                has_must = True
                required &= mask
            else:
                has_should = True
                any_should |= mask
            positive.append((clause, mask))

        matched = required if has_must else required & any_should
        if not has_must and not has_should:
            return []
        if not matched.any():
            return []

        for clause, mask in positive:
            hit = mask & matched
            if not hit.any():
                continue
            bm25 = self._bm25[clause.field]
            clause_scores = np.asarray(bm25.get_scores(list(clause.terms)), dtype=float)
            scores += np.where(hit, clause_scores, 0.0)

        hit_idx = np.flatnonzero(matched)
        order = np.argsort(-scores[hit_idx], kind="stable")
        ranked = hit_idx[order][:limit]
        return [(self._ids[i], float(scores[i])) for i in ranked]
