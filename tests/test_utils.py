# File: tests/test_utils.py

import numpy as np
import pytest
import scipy.sparse

from umappy._utils import check_random_state, check_dtype, is_symmetric


def test_check_random_state():
    rng = np.random.default_rng(0)
    assert check_random_state(rng) is rng
    assert isinstance(check_random_state(None), np.random.Generator)
    assert isinstance(check_random_state(np.random.RandomState(0)), np.random.Generator)
    np.testing.assert_array_equal(
        check_random_state(5).random(3), np.random.default_rng(5).random(3)
    )
    with pytest.raises(ValueError):
        check_random_state("seed")


def test_check_dtype():
    assert check_dtype(np.float32) == np.float32
    assert check_dtype("float64") == np.float64
    with pytest.raises(ValueError):
        check_dtype(np.int64)


def test_is_symmetric_sparse_tolerance():
    dense = np.array([[0.0, 0.5], [0.5 + 1e-9, 0.0]])
    assert is_symmetric(scipy.sparse.csr_matrix(dense))

    dense[1, 0] = 0.6
    assert not is_symmetric(scipy.sparse.csr_matrix(dense))
    assert not is_symmetric(dense)
    assert not is_symmetric(scipy.sparse.csr_matrix(np.zeros((2, 3))))
