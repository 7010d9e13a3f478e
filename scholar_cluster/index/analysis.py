"""
Text analysis shared by indexing and querying: lower-cased alphanumeric
tokens, a small stop-word list, and Porter stemming so that different
forms of a word ("learned", "learning", "learns") index to the same term.
"""

from __future__ import annotations

import re
from typing import List

from nltk.stem import PorterStemmer

_TOKEN_RE = re.compile(r"[a-z0-9]+")

STOP_WORDS = {
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to',
    'for', 'of', 'with', 'by', 'is', 'are', 'was', 'were'
}

STEMMER = PorterStemmer()


def analyze(text: str) -> List[str]:
    """
    Tokenize and normalize text for the index.
    """
    if not text:
        return []
    words = _TOKEN_RE.findall(text.lower())
    return [STEMMER.stem(w) for w in words if w not in STOP_WORDS]
