import numpy as np
import pytest

from asciinmf.projection import pinv_projection


def _random_dictionary(m: int, r: int, seed: int = 0) -> np.ndarray:
    W = np.random.RandomState(seed).rand(m, r)
    return W / np.linalg.norm(W, axis=0, keepdims=True)


def test_identity_dictionary_returns_v() -> None:
    V = np.random.RandomState(1).rand(6, 5)
    np.testing.assert_allclose(pinv_projection(V, np.eye(6)), V, atol=1e-12)


def test_recovers_exact_activations() -> None:
    W = _random_dictionary(16, 4)
    H_true = np.random.RandomState(2).randn(4, 7)

    H = pinv_projection(W @ H_true, W)
    np.testing.assert_allclose(H, H_true, atol=1e-10)


def test_activations_can_be_negative() -> None:
    W = np.array([[1.0, 0.0], [1.0, 1.0]]) / np.array([np.sqrt(2.0), 1.0])
    V = np.array([[0.0], [1.0]])

    H = pinv_projection(V, W)
    assert H.shape == (2, 1)
    assert H.min() < 0.0


def test_is_deterministic() -> None:
    W = _random_dictionary(9, 3)
    V = np.random.RandomState(3).rand(9, 4)

    np.testing.assert_array_equal(pinv_projection(V, W), pinv_projection(V, W))


def test_shape_mismatch_raises() -> None:
    with pytest.raises(ValueError):
        pinv_projection(np.ones((4, 2)), np.eye(3))
