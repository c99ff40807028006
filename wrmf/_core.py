"""ALS optimizer and epoch controller operating on an explicit model state."""

from __future__ import annotations

import numbers
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from ._solver import gram_matrix, row_correction, solve_row
from .config import WRMFConfig
from .exceptions import DimensionMismatchError
from .interactions import InteractionMatrix
from .typing import InteractionView

#: Returned by :func:`compute_fit`.  No squared loss is negative, so this
#: can never be mistaken for a quality score.
FIT_UNAVAILABLE: float = -1.0


@dataclass
class ModelState:
    """Everything one epoch reads and writes.

    ``user_factors`` and ``item_factors`` are overwritten in place, row by
    row; they are never reallocated or resized.
    """

    config: WRMFConfig
    interactions: InteractionMatrix
    user_factors: np.ndarray
    item_factors: np.ndarray


def init_factors(n_rows: int, config: WRMFConfig, rng: np.random.Generator) -> np.ndarray:
    """Dense ``(n_rows, num_factors)`` matrix drawn from N(init_mean, init_stdev²)."""
    return rng.normal(config.init_mean, config.init_stdev, size=(n_rows, config.num_factors))


def init_state(interactions: InteractionMatrix, config: WRMFConfig, seed: int | None = None) -> ModelState:
    """Allocate and randomly initialise both factor matrices for ``interactions``."""
    rng = np.random.default_rng(seed)
    n_users, n_items = interactions.shape
    user_factors = init_factors(n_users, config, rng)
    item_factors = init_factors(n_items, config, rng)
    return ModelState(config, interactions, user_factors, item_factors)


def _check_dimensions(data: InteractionView, W: np.ndarray, H: np.ndarray, config: WRMFConfig) -> None:
    if W.ndim != 2 or H.ndim != 2:
        raise DimensionMismatchError(f"Factor matrices must be 2-D, got W.ndim={W.ndim} and H.ndim={H.ndim}.")
    n_rows, n_cols = data.shape
    if n_rows != W.shape[0]:
        raise DimensionMismatchError(f"Interaction matrix has {n_rows} rows but W has {W.shape[0]}.")
    if n_cols != H.shape[0]:
        raise DimensionMismatchError(f"Interaction matrix has {n_cols} columns but H has {H.shape[0]} rows.")
    if W.shape[1] != config.num_factors or H.shape[1] != config.num_factors:
        raise DimensionMismatchError(
            f"Expected {config.num_factors} factors, got W with {W.shape[1]} and H with {H.shape[1]}."
        )


def check_n_jobs(n_jobs: int) -> int:
    """Validate a thread count; ``-1`` resolves to the number of CPUs."""
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, numbers.Integral):
        raise ValueError(f"n_jobs must be a positive integer or -1, got {n_jobs!r}.")
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be a positive integer or -1, got {n_jobs}.")
    return int(n_jobs)


def _resolve_n_jobs(n_jobs: int, n_rows: int) -> int:
    return max(1, min(check_n_jobs(n_jobs), n_rows))


def _optimize_rows(
    data: InteractionView,
    W: np.ndarray,
    H: np.ndarray,
    G: np.ndarray,
    config: WRMFConfig,
    rows: range,
) -> None:
    for u in rows:
        C, b = row_correction(H, data.row_entries(u), config.c_pos)
        W[u] = solve_row(G, C, b, config.regularization)


def optimize(
    data: InteractionView,
    W: np.ndarray,
    H: np.ndarray,
    config: WRMFConfig,
    n_jobs: int = 1,
) -> None:
    """Recompute every row of ``W`` against the fixed factors ``H``.

    ``data`` must be oriented so that its rows are ``W``'s entities and its
    columns are ``H``'s: pass the interaction matrix to update users and its
    transpose to update items.  ``H`` is only read.

    Parameters
    ----------
    data : InteractionView
        Observed entries, shape ``(rows(W), rows(H))``.
    W : np.ndarray
        Factors being optimised, updated in place.
    H : np.ndarray
        Fixed factors.
    config : WRMFConfig
        Hyperparameters (``c_pos``, ``regularization``, ``num_factors``).
    n_jobs : int, default=1
        Number of threads.  Rows are split into disjoint contiguous ranges,
        one per thread.  ``-1`` uses all CPUs.

    Raises
    ------
    DimensionMismatchError
        If ``data``, ``W`` and ``H`` disagree on their shapes.
    SingularSystemError
        If a row system is not positive definite (``regularization == 0``).
    """
    _check_dimensions(data, W, H, config)
    check_n_jobs(n_jobs)
    n_rows = W.shape[0]
    if n_rows == 0:
        return

    # (1) HᵀH in O(F²·rows(H)), shared by every row below
    G = gram_matrix(H)

    # (2) one independent solve per row of W
    workers = _resolve_n_jobs(n_jobs, n_rows)
    if workers == 1:
        _optimize_rows(data, W, H, G, config, range(n_rows))
        return

    bounds = np.linspace(0, n_rows, workers + 1, dtype=np.int64)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(_optimize_rows, data, W, H, G, config, range(int(start), int(end)))
            for start, end in zip(bounds[:-1], bounds[1:])
        ]
        for future in futures:
            future.result()


def iterate(state: ModelState, n_jobs: int = 1) -> None:
    """Run one epoch: users against fixed items, then items against the new users.

    The item pass must see the refreshed user factors, so the two passes
    always run in this order and never overlap.
    """
    optimize(state.interactions, state.user_factors, state.item_factors, state.config, n_jobs=n_jobs)
    optimize(state.interactions.T, state.item_factors, state.user_factors, state.config, n_jobs=n_jobs)


def compute_fit() -> float:
    """Training fit is not computed by WRMF; always returns :data:`FIT_UNAVAILABLE`."""
    return FIT_UNAVAILABLE
