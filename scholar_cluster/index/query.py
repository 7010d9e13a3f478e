"""
Query language of the text index.

    neural networks            any term may match (default field: title)
    "neural network"           phrase: terms must appear next to each other
    +graph -survey             required / prohibited clauses
    abstract:"deep learning"   search another field
    graph AND neural NOT survey

Parentheses are accepted when balanced but do not group; the clauses
inside them are read as if the parentheses were not there.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from scholar_cluster.errors import QuerySyntaxError
from scholar_cluster.index.analysis import analyze

DEFAULT_FIELD = "title"
SEARCHABLE_FIELDS = ("title", "abstract", "authors", "venue", "year")

_KEYWORDS = {"AND", "OR", "NOT"}


class Occur(str, Enum):
    SHOULD = "should"
    MUST = "must"
    MUST_NOT = "must_not"


@dataclass(frozen=True)
class Clause:
    field: str
    terms: Tuple[str, ...]
    occur: Occur = Occur.SHOULD
    phrase: bool = False


@dataclass(frozen=True)
class _Token:
    text: str
    quoted: bool = False


def _lex(query: str) -> List[_Token]:
    tokens: List[_Token] = []
    depth = 0
    i = 0
    n = len(query)

    while i < n:
        ch = query[i]
        if ch.isspace():
            i += 1
        elif ch == "(":
            depth += 1
            i += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise QuerySyntaxError(query, "unbalanced ')'")
            i += 1
        elif ch == '"':
            end = query.find('"', i + 1)
            if end == -1:
                raise QuerySyntaxError(query, "unterminated quoted phrase")
            tokens.append(_Token(query[i + 1:end], quoted=True))
            i = end + 1
        else:
            start = i
            while i < n and not query[i].isspace() and query[i] not in '()"':
                i += 1
            tokens.append(_Token(query[start:i]))

    if depth != 0:
        raise QuerySyntaxError(query, "unbalanced '('")
    return tokens


def _split_field(query: str, word: str) -> Tuple[str, str]:
    if ":" not in word:
        return DEFAULT_FIELD, word

    field, _, value = word.partition(":")
    field = field.lower()
    if not field:
        raise QuerySyntaxError(query, f"missing field name in {word!r}")
    if field not in SEARCHABLE_FIELDS:
        raise QuerySyntaxError(query, f"unknown field {field!r}")
    return field, value


def parse_query(query: str) -> List[Clause]:
    """
    Parse query text into clauses.

    Clauses whose terms are all stop words are dropped, so the result may
    be empty. Raises QuerySyntaxError on malformed input.
    """
    if query is None or not query.strip():
        raise QuerySyntaxError(query or "", "empty query")

    tokens = _lex(query)
    clauses: List[Clause] = []
    pending: Optional[Occur] = None
    force_next_must = False
    last_was_operator = False
    i = 0

    while i < len(tokens):
        tok = tokens[i]
        has_next = i + 1 < len(tokens)

        if not tok.quoted and tok.text in _KEYWORDS:
            if not has_next:
                raise QuerySyntaxError(query, f"{tok.text} at end of query")
            if tok.text == "NOT":
                pending = Occur.MUST_NOT
            else:
                if not clauses and not last_was_operator:
                    raise QuerySyntaxError(query, f"{tok.text} at start of query")
                if tok.text == "AND":
                    if clauses and clauses[-1].occur == Occur.SHOULD:
                        prev = clauses[-1]
                        clauses[-1] = Clause(prev.field, prev.terms, Occur.MUST, prev.phrase)
                    force_next_must = True
            last_was_operator = True
            i += 1
            continue

        occur = pending or (Occur.MUST if force_next_must else Occur.SHOULD)
        pending = None
        force_next_must = False
        last_was_operator = False

        if tok.quoted:
            field, text, phrase = DEFAULT_FIELD, tok.text, True
        else:
            word = tok.text
            if word[0] in "+-":
                if len(word) == 1:
                    raise QuerySyntaxError(query, f"dangling {word!r}")
                occur = Occur.MUST if word[0] == "+" else Occur.MUST_NOT
                word = word[1:]

            field, value = _split_field(query, word)
            if value:
                text, phrase = value, False
            elif has_next and tokens[i + 1].quoted:
                # field:"some phrase"
                i += 1
                text, phrase = tokens[i].text, True
            else:
                raise QuerySyntaxError(query, f"empty value for field {field!r}")

        terms = tuple(analyze(text))
        if terms:
            clauses.append(Clause(field, terms, occur, phrase and len(terms) > 1))
        i += 1

    if clauses and all(c.occur == Occur.MUST_NOT for c in clauses):
        raise QuerySyntaxError(query, "query contains only prohibited clauses")

    return clauses
