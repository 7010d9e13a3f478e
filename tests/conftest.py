# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from scholar_cluster.nlp.embedding import KeyedVectorsTable
from scholar_cluster.nlp.encoder import SemanticEncoder

WORD_VECTORS = {
    "neural": [1.0, 0.0, 0.0],
    "network": [0.9, 0.1, 0.0],
    "networks": [0.9, 0.1, 0.0],
    "deep": [0.8, 0.0, 0.2],
    "graph": [0.0, 1.0, 0.0],
    "mining": [0.0, 0.8, 0.2],
    "database": [0.0, 0.0, 1.0],
    "query": [0.0, 0.1, 0.9],
}

# 1 -> {2, 3}, 2 -> {3}, 4 -> {3}, plus one reference outside the corpus.
SAMPLE_DATASET = """\
#*Neural Networks for Graph Learning
#@Alice Smith, Bob Jones
#t2008
#cKDD
#index1
#%2
#%3
#!We study neural networks on graphs.

#*Deep Neural Network Training
#@Carol White
#t2007
#cNIPS
#index2
#%3
#%999
#!Training deep networks end to end.

#*Graph Mining Survey
#@Dan Brown
#t2005
#cSIGMOD
#index3
#!A survey of graph mining methods.

#*Database Query Optimization
#@Eve Black
#t2006
#cVLDB
#index4
#%3
#!Cost-based query optimization.
"""


@pytest.fixture
def embedding_table() -> KeyedVectorsTable:
    return KeyedVectorsTable.from_mapping(WORD_VECTORS)


@pytest.fixture
def encoder(embedding_table) -> SemanticEncoder:
    return SemanticEncoder(embedding_table)


@pytest.fixture
def sample_lines() -> List[str]:
    return SAMPLE_DATASET.splitlines(keepends=True)


@pytest.fixture
def dataset_file(tmp_path) -> Path:
    path = tmp_path / "citations.txt"
    path.write_text(SAMPLE_DATASET, encoding="utf-8")
    return path


@pytest.fixture
def word2vec_file(tmp_path) -> Path:
    lines = [f"{len(WORD_VECTORS)} 3"]
    for word, vec in WORD_VECTORS.items():
        lines.append(word + " " + " ".join(str(x) for x in vec))
    path = tmp_path / "vectors.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
