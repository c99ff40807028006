"""Per-row normal equations of weighted implicit-feedback ALS.

Comments are in terms of computing one user row against fixed item factors
``H``; the item side is the same with the roles exchanged.

For user ``u`` with observed items ``S`` the row solves

    (HᵀH + C_u + λI) x = b_u

where ``HᵀH`` is shared by every row of a pass and only the correction
``C_u`` and right-hand side ``b_u`` touch ``S``, so no row ever iterates
over its unobserved entries: O(F²·|S|) per row on top of the O(F²·N) Gram
matrix.
"""

from __future__ import annotations

import numpy as np
from scipy import linalg

from .exceptions import SingularSystemError


def gram_matrix(H: np.ndarray) -> np.ndarray:
    """``HᵀH`` for the fixed-side factors, exactly symmetric."""
    G = H.T @ H
    return (G + G.T) * 0.5


def row_correction(H: np.ndarray, entries: np.ndarray, c_pos: float) -> tuple[np.ndarray, np.ndarray]:
    """Confidence correction ``C_u`` and right-hand side ``b_u`` for one row.

    Parameters
    ----------
    H : np.ndarray
        Fixed-side factors, shape ``(n, F)``.
    entries : np.ndarray
        Indices into ``H`` of the row's observed entries.
    c_pos : float
        Confidence weight of observed entries.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        ``C_u = c_pos · Σ_{i∈S} h_i h_iᵀ`` with shape ``(F, F)`` and
        ``b_u = (1 + c_pos) · Σ_{i∈S} h_i`` with shape ``(F,)``.  Both are
        zero when ``entries`` is empty.
    """
    # c_pos on C_u and 1 + c_pos on b_u, not c_pos - 1 and c_pos
    H_s = H[entries]
    C = c_pos * (H_s.T @ H_s)
    b = (1.0 + c_pos) * H_s.sum(axis=0)
    return C, b


def cholesky_solve(M: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve ``M x = b`` for symmetric positive-definite ``M``.

    Cholesky factorisation followed by forward and back substitution.

    Raises
    ------
    SingularSystemError
        If ``M`` is not positive definite or the solution is not finite.
    """
    try:
        factor = linalg.cho_factor(M, lower=True, check_finite=False)
    except np.linalg.LinAlgError as exc:
        raise SingularSystemError(
            f"Row system of size {M.shape[0]} is not positive definite; "
            "use regularization > 0 for rows without observed entries."
        ) from exc
    x = linalg.cho_solve(factor, b, check_finite=False)
    if not np.all(np.isfinite(x)):
        raise SingularSystemError("Row system is numerically singular: the solution is not finite.")
    return x


def solve_row(G: np.ndarray, C: np.ndarray, b: np.ndarray, regularization: float) -> np.ndarray:
    """New factor vector for one row: solves ``(G + C + λI) x = b``."""
    M = G + C
    M[np.diag_indices_from(M)] += regularization
    return cholesky_solve(M, b)
