# tests/test_encoder.py

import numpy as np
import pytest

from scholar_cluster.nlp.encoder import cosine_similarity


def test_encode_is_mean_of_known_tokens(encoder):
    vec = encoder.encode("Neural GRAPH unknownword")
    np.testing.assert_allclose(vec, [0.5, 0.5, 0.0])


def test_encode_without_known_tokens_is_zero_vector(encoder):
    for text in ["", "   ", "nothing matches here"]:
        vec = encoder.encode(text)
        assert vec.shape == (3,)
        assert not vec.any()


def test_encoder_width(encoder):
    assert encoder.width == 3


def test_cosine_similarity_basic():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_cosine_similarity_zero_magnitude_is_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity(np.zeros(3), np.zeros(3)) == 0.0


def test_cosine_similarity_width_mismatch():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])
