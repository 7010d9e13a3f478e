# scholar_cluster/errors.py

from __future__ import annotations

from typing import Optional


class ScholarClusterError(Exception):
    """Base class for every error raised by the search pipeline."""


class ParseError(ScholarClusterError):
    """
    The citation dataset is malformed (a record field appeared before any
    title marker opened a record).
    """

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class QuerySyntaxError(ScholarClusterError):
    """The lexical query text could not be parsed by the text index."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Cannot parse query {query!r}: {reason}")
        self.query = query
        self.reason = reason


class IndexUnavailableError(ScholarClusterError):
    """The text index could not be opened for reading."""


class EmbeddingLoadError(ScholarClusterError):
    """The word embedding model is missing or corrupt."""


class ClusteringError(ScholarClusterError):
    """The clustering engine rejected the requested partition."""
