import os

import numpy as np
import pytest

from asciinmf.utils.validation import (
    check_beta,
    check_image_array,
    check_n_iter,
    check_n_jobs,
    check_threshold,
)


def test_threshold_bounds() -> None:
    assert check_threshold(0) == 0.0
    assert check_threshold(1.0) == 1.0
    with pytest.raises(ValueError):
        check_threshold(1.0001)
    with pytest.raises(TypeError):
        check_threshold("0.5")


def test_iteration_bounds() -> None:
    assert check_n_iter(1) == 1
    assert check_n_iter(np.int64(65535)) == 65535
    with pytest.raises(ValueError):
        check_n_iter(0)
    with pytest.raises(TypeError):
        check_n_iter(10.0)
    with pytest.raises(TypeError):
        check_n_iter(True)


def test_beta_values_and_names() -> None:
    assert check_beta(0.5) == 0.5
    assert check_beta(-1) == -1.0
    assert check_beta('Itakura-Saito') == 0.0
    assert check_beta('kl') == 1.0
    assert check_beta('frobenius') == 2.0
    with pytest.raises(ValueError):
        check_beta(float('inf'))
    with pytest.raises(ValueError):
        check_beta('cosine')


def test_worker_count() -> None:
    assert check_n_jobs(None) == (os.cpu_count() or 1)
    assert check_n_jobs(3) == 3
    with pytest.raises(ValueError):
        check_n_jobs(-2)


def test_image_array_shapes() -> None:
    assert check_image_array(np.zeros((2, 3))).shape == (2, 3)
    assert check_image_array(np.zeros((2, 3, 4))).shape == (2, 3, 4)
    with pytest.raises(ValueError):
        check_image_array(np.zeros((2, 3, 0)))
    with pytest.raises(ValueError):
        check_image_array(np.array([['a', 'b']]))
