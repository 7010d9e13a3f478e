"""
Parser for line-oriented citation-network dumps (ACM / DBLP "outputacm" format).

Each record starts with a title line and runs until the next title line
or end of input:

    #*Title of the paper
    #@Author One, Author Two
    #t2008
    #cVenue name
    #index123
    #%45          (one line per cited paper id, repeatable)
    #!Abstract text

Records are accumulated in a `_RecordBuilder` and only turned into a
`Paper` once they are complete, so no other component ever sees a
half-read record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from scholar_cluster.errors import ParseError
from scholar_cluster.models.paper import Paper
from scholar_cluster.nlp.encoder import SemanticEncoder

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TITLE_MARKER = "#*"
AUTHORS_MARKER = "#@"
YEAR_MARKER = "#t"
VENUE_MARKER = "#c"
ID_MARKER = "#index"
REFERENCE_MARKER = "#%"
ABSTRACT_MARKER = "#!"

# Checked in order; the first matching prefix wins.
FIELD_MARKERS = (
    AUTHORS_MARKER,
    YEAR_MARKER,
    VENUE_MARKER,
    ID_MARKER,
    REFERENCE_MARKER,
    ABSTRACT_MARKER,
)


@dataclass
class _RecordBuilder:
    title: str
    line_number: int
    authors: str = ""
    year: str = ""
    venue: str = ""
    paper_id: Optional[str] = None
    abstract: str = ""
    references: List[str] = field(default_factory=list)
    has_abstract: bool = False

    def apply(self, marker: str, value: str) -> None:
        if marker == AUTHORS_MARKER:
            self.authors = value
        elif marker == YEAR_MARKER:
            self.year = value
        elif marker == VENUE_MARKER:
            self.venue = value
        elif marker == ID_MARKER:
            self.paper_id = value or None
        elif marker == REFERENCE_MARKER:
            if value:
                self.references.append(value)
        elif marker == ABSTRACT_MARKER:
            self.abstract = value
            self.has_abstract = True

    def build(self, encoder: Optional[SemanticEncoder]) -> Paper:
        # The abstract line is what triggers encoding; the title is the input.
        vector = None
        if self.has_abstract and encoder is not None:
            vector = encoder.encode(self.title)
        return Paper(
            id=self.paper_id,
            title=self.title,
            authors=self.authors,
            year=self.year,
            venue=self.venue,
            abstract=self.abstract,
            references=list(self.references),
            semantic_vector=vector,
        )


@dataclass
class ParsedCorpus:
    """
    Output of the parser.

    - papers: id -> Paper, in first-seen order of the id
    - anonymous: records that never got an id
    """
    papers: Dict[str, Paper] = field(default_factory=dict)
    anonymous: List[Paper] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.papers) + len(self.anonymous)


def _match_marker(line: str) -> Optional[str]:
    if line.startswith(TITLE_MARKER):
        return TITLE_MARKER
    for marker in FIELD_MARKERS:
        if line.startswith(marker):
            return marker
    return None


def iter_papers(lines: Iterable[str], encoder: Optional[SemanticEncoder] = None) -> Iterator[Paper]:
    """
    Yield one Paper per record in `lines`.

    Raises ParseError if a field marker shows up before the first title.
    Lines without a known marker are ignored. Without an encoder no
    semantic vectors are computed.
    """
    current: Optional[_RecordBuilder] = None

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        marker = _match_marker(line)
        if marker is None:
            continue

        value = line[len(marker):].strip()

        if marker == TITLE_MARKER:
            if current is not None:
                yield current.build(encoder)
            current = _RecordBuilder(title=value, line_number=line_number)
            continue

        if current is None:
            raise ParseError(
                f"field marker {marker!r} appears before any title marker",
                line_number=line_number,
            )
        current.apply(marker, value)

    if current is not None:
        yield current.build(encoder)


def parse_lines(
    lines: Iterable[str],
    encoder: Optional[SemanticEncoder] = None,
    progress_every: int = 1000,
) -> ParsedCorpus:
    """
    Parse a whole record stream into a ParsedCorpus.

    A repeated id replaces the earlier record with that id.
    """
    corpus = ParsedCorpus()

    for count, paper in enumerate(iter_papers(lines, encoder), start=1):
        if paper.id is None:
            corpus.anonymous.append(paper)
        else:
            if paper.id in corpus.papers:
                logger.warning("Duplicate paper id %r; keeping the later record", paper.id)
            corpus.papers[paper.id] = paper

        if count % progress_every == 0:
            logger.info("Parsed %d records", count)

    logger.info(
        "Parsed %d papers (%d without an id)",
        len(corpus.papers),
        len(corpus.anonymous),
    )
    return corpus


def parse_file(
    path: PathLike,
    encoder: Optional[SemanticEncoder] = None,
    progress_every: int = 1000,
) -> ParsedCorpus:
    """
    Parse a dataset file. Undecodable bytes are replaced rather than fatal.
    """
    dataset_path = Path(path)
    if not dataset_path.is_file():
        raise FileNotFoundError(f"Dataset not found: {dataset_path}")

    logger.info("Loading papers from %s", dataset_path)
    with dataset_path.open("r", encoding="utf-8", errors="replace") as f:
        return parse_lines(f, encoder, progress_every=progress_every)
