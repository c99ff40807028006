"""pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys

import numpy as np
import pytest
from scipy.sparse import csr_matrix

from wrmf import InteractionMatrix, WRMFConfig

# Ensure tests/ dir is on path so test modules can import get_checker_board
sys.path.insert(0, os.path.dirname(__file__))


def get_checker_board(n: int) -> csr_matrix:
    row, col = [], []
    for i in range(n):
        for j in range(n):
            if i % 2 == j % 2:
                row.append(i)
                col.append(j)
    return csr_matrix((np.ones(len(row), dtype=np.float32), (row, col)), shape=(n, n))


@pytest.fixture
def checker_board() -> csr_matrix:
    return get_checker_board(20)


@pytest.fixture
def toy_interactions() -> InteractionMatrix:
    """2 users x 2 items: user 0 saw item 1, user 1 saw both."""
    return InteractionMatrix(np.array([[0, 1], [1, 1]]))


@pytest.fixture
def toy_item_factors() -> np.ndarray:
    return np.array([[1.0, 2.0], [3.0, 4.0]])


@pytest.fixture
def toy_config() -> WRMFConfig:
    return WRMFConfig(num_factors=2, c_pos=2.0, regularization=0.5)


@pytest.fixture
def random_interactions() -> InteractionMatrix:
    rng = np.random.default_rng(7)
    dense = rng.random((30, 25)) < 0.2
    dense[3] = False  # one user without interactions
    dense[:, 5] = False  # one item without interactions
    return InteractionMatrix(dense)
