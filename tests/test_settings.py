# tests/test_settings.py

from pathlib import Path

from scholar_cluster.config.settings import EmbeddingBackend, Settings, get_settings
from scholar_cluster.models.weights import FusionWeights


def test_defaults_match_ranking_constants():
    s = Settings()

    assert s.DAMPING_FACTOR == 0.85
    assert s.AUTHORITY_ROUNDS == 1
    assert s.AUTHORITY_SCALE == 100000.0
    assert s.OVERFETCH_FACTOR == 10
    assert s.CLUSTER_MAX_ITERATIONS == 100
    assert s.EMBEDDING_BACKEND == EmbeddingBackend.WORD2VEC
    assert s.fusion_weights == FusionWeights(0.5, 0.2, 0.3, 100000.0)


def test_env_overrides_use_prefix(monkeypatch):
    monkeypatch.setenv("SCHOLAR_CLUSTER_AUTHORITY_ROUNDS", "5")
    monkeypatch.setenv("SCHOLAR_CLUSTER_LEXICAL_WEIGHT", "0.7")
    monkeypatch.setenv("SCHOLAR_CLUSTER_EMBEDDING_BACKEND", "sentence-transformer")

    s = Settings()

    assert s.AUTHORITY_ROUNDS == 5
    assert s.fusion_weights.lexical == 0.7
    assert s.EMBEDDING_BACKEND == EmbeddingBackend.SENTENCE_TRANSFORMER


def test_index_dir_is_under_data_dir(tmp_path):
    s = Settings(DATA_DIR=tmp_path / "data")
    assert s.index_dir == tmp_path / "data" / "index"


def test_get_settings_is_a_singleton():
    first = get_settings()
    second = get_settings()

    assert first is second
    assert isinstance(first.DATA_DIR, Path)
    assert first.index_dir.is_dir()
