# tests/test_embedding.py

import numpy as np
import pytest

from scholar_cluster.config.settings import EmbeddingBackend, Settings
from scholar_cluster.errors import EmbeddingLoadError
from scholar_cluster.nlp.embedding import KeyedVectorsTable, load_embedding_table
from scholar_cluster.nlp.sentence_table import SentenceEmbeddingTable


def test_from_mapping_lookup(embedding_table):
    assert embedding_table.dimensionality() == 3
    np.testing.assert_allclose(embedding_table.lookup("graph"), [0.0, 1.0, 0.0])
    assert embedding_table.lookup("unknown") is None


def test_from_mapping_empty_needs_vector_size():
    with pytest.raises(ValueError):
        KeyedVectorsTable.from_mapping({})

    table = KeyedVectorsTable.from_mapping({}, vector_size=4)
    assert table.dimensionality() == 4
    assert len(table) == 0


def test_load_text_word2vec_file(word2vec_file):
    table = KeyedVectorsTable.load(word2vec_file)

    assert table.dimensionality() == 3
    np.testing.assert_allclose(table.lookup("neural"), [1.0, 0.0, 0.0])
    assert table.lookup("missing") is None


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(EmbeddingLoadError):
        KeyedVectorsTable.load(tmp_path / "nope.bin")


def test_load_corrupt_file_raises(tmp_path):
    bad = tmp_path / "bad.txt"
    bad.write_text("2 3\ngraph 1.0 0.0\n", encoding="utf-8")

    with pytest.raises(EmbeddingLoadError):
        KeyedVectorsTable.load(bad)


def test_load_embedding_table_from_settings(word2vec_file):
    s = Settings(EMBEDDING_MODEL_PATH=word2vec_file)
    table = load_embedding_table(s)
    assert table.dimensionality() == 3


def test_load_embedding_table_without_model_path():
    s = Settings(EMBEDDING_BACKEND=EmbeddingBackend.WORD2VEC, EMBEDDING_MODEL_PATH=None)
    with pytest.raises(EmbeddingLoadError):
        load_embedding_table(s)


class DummySentenceModel:
    def __init__(self):
        self.calls = []

    def get_sentence_embedding_dimension(self):
        return 2

    def encode(self, text, convert_to_numpy=True, show_progress_bar=False):
        self.calls.append(text)
        return np.array([float(len(text)), 1.0])


def test_sentence_table_encodes_and_caches_tokens():
    backend = DummySentenceModel()
    table = SentenceEmbeddingTable(backend)

    assert table.dimensionality() == 2
    np.testing.assert_allclose(table.lookup("graph"), [5.0, 1.0])
    table.lookup("graph")
    assert backend.calls == ["graph"]
    assert table.lookup("") is None


def test_sentence_table_cache_is_bounded():
    backend = DummySentenceModel()
    table = SentenceEmbeddingTable(backend, cache_size=2)

    for token in ["graph", "neural", "mining", "graph"]:
        table.lookup(token)

    # "graph" was evicted by "mining", so it is encoded again
    assert backend.calls == ["graph", "neural", "mining", "graph"]
    assert table.cache_info().currsize == 2
    assert table.cache_info().maxsize == 2

    table.lookup("graph")
    assert len(backend.calls) == 4
