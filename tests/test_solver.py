"""Tests for the Gram / correction builder and the per-row Cholesky solver."""

from __future__ import annotations

import numpy as np
import pytest

from wrmf import SingularSystemError, cholesky_solve, gram_matrix, row_correction, solve_row


def test_gram_matrix_symmetric() -> None:
    rng = np.random.default_rng(0)
    H = rng.normal(size=(50, 8))
    G = gram_matrix(H)
    assert G.shape == (8, 8)
    np.testing.assert_array_equal(G, G.T)
    np.testing.assert_allclose(G, H.T @ H, rtol=1e-12, atol=1e-12)


def test_gram_matrix_toy(toy_item_factors: np.ndarray) -> None:
    np.testing.assert_allclose(gram_matrix(toy_item_factors), [[10.0, 14.0], [14.0, 20.0]])


def test_row_correction_toy(toy_item_factors: np.ndarray) -> None:
    C, b = row_correction(toy_item_factors, np.array([1]), c_pos=2.0)
    np.testing.assert_allclose(C, [[18.0, 24.0], [24.0, 32.0]])
    np.testing.assert_allclose(b, [9.0, 12.0])


def test_row_correction_matches_loop() -> None:
    rng = np.random.default_rng(1)
    H = rng.normal(size=(20, 4))
    entries = np.array([2, 5, 11, 19])
    c_pos = 3.5
    C, b = row_correction(H, entries, c_pos)

    expected_C = np.zeros((4, 4))
    expected_b = np.zeros(4)
    for i in entries:
        expected_C += c_pos * np.outer(H[i], H[i])
        expected_b += (1 + c_pos) * H[i]
    np.testing.assert_allclose(C, expected_C, rtol=1e-12)
    np.testing.assert_allclose(b, expected_b, rtol=1e-12)
    np.testing.assert_allclose(C, C.T, rtol=1e-12)


def test_row_correction_empty_row() -> None:
    H = np.arange(12, dtype=np.float64).reshape(4, 3)
    C, b = row_correction(H, np.array([], dtype=np.int32), c_pos=5.0)
    np.testing.assert_array_equal(C, np.zeros((3, 3)))
    np.testing.assert_array_equal(b, np.zeros(3))


def test_solve_row_known_instance(toy_item_factors: np.ndarray) -> None:
    # M = [[28.5, 38], [38, 52.5]], b = [9, 12]  =>  x = [6/19, 0]
    G = gram_matrix(toy_item_factors)
    C, b = row_correction(toy_item_factors, np.array([1]), c_pos=2.0)
    x = solve_row(G, C, b, regularization=0.5)
    np.testing.assert_allclose(x, [6.0 / 19.0, 0.0], rtol=0, atol=1e-9)


def test_solve_row_does_not_modify_inputs(toy_item_factors: np.ndarray) -> None:
    G = gram_matrix(toy_item_factors)
    C, b = row_correction(toy_item_factors, np.array([0, 1]), c_pos=2.0)
    G_before, C_before, b_before = G.copy(), C.copy(), b.copy()
    solve_row(G, C, b, regularization=0.5)
    np.testing.assert_array_equal(G, G_before)
    np.testing.assert_array_equal(C, C_before)
    np.testing.assert_array_equal(b, b_before)


def test_solve_row_empty_row_is_zero() -> None:
    rng = np.random.default_rng(2)
    H = rng.normal(size=(10, 5))
    C, b = row_correction(H, np.array([], dtype=np.int32), c_pos=1.0)
    x = solve_row(gram_matrix(H), C, b, regularization=0.1)
    np.testing.assert_array_equal(x, np.zeros(5))


def test_cholesky_solve_matches_numpy() -> None:
    rng = np.random.default_rng(3)
    A = rng.normal(size=(6, 6))
    M = A @ A.T + 6 * np.eye(6)
    b = rng.normal(size=6)
    np.testing.assert_allclose(cholesky_solve(M, b), np.linalg.solve(M, b), rtol=1e-10)


def test_cholesky_solve_rejects_indefinite() -> None:
    with pytest.raises(SingularSystemError, match="not positive definite"):
        cholesky_solve(np.array([[1.0, 2.0], [2.0, 1.0]]), np.array([1.0, 1.0]))


def test_solve_row_singular_without_regularization() -> None:
    H = np.array([[1.0, 0.0], [1.0, 0.0]])
    C, b = row_correction(H, np.array([], dtype=np.int32), c_pos=1.0)
    with pytest.raises(SingularSystemError):
        solve_row(gram_matrix(H), C, b, regularization=0.0)


def test_singular_system_error_is_linalg_error() -> None:
    with pytest.raises(np.linalg.LinAlgError):
        cholesky_solve(np.zeros((3, 3)), np.zeros(3))
