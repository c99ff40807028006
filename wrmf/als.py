"""Weighted Regularized Matrix Factorization (WRMF) for implicit feedback."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import numpy as np

from . import _core
from ._core import ModelState
from .config import WRMFConfig
from .interactions import InteractionMatrix
from .model import ImplicitRecommender


class WRMF(ImplicitRecommender):
    """Weighted matrix factorization trained by alternating least squares.

    Implements the one-class / implicit-feedback model of Hu, Koren &
    Volinsky (ICDM 2008) and Pan et al. (ICDM 2008): every unobserved entry
    is a weak negative with unit weight, every observed entry carries the
    extra confidence ``c_pos``.  Each epoch solves all user rows against the
    fixed item factors, then all item rows against the new user factors.

    Incremental updates are not supported; refit a new instance instead.

    Parameters
    ----------
    factors : int, default=10
        Number of latent factors.
    c_pos : float, default=1.0
        Confidence weight of observed interactions.
    regularization : float, default=0.015
        L2 penalty on every factor row.  Must be positive when some user or
        item has no interactions.
    iterations : int, default=15
        Number of ALS epochs.
    init_mean : float, default=0.0
        Mean of the normal initialisation.
    init_stdev : float, default=0.1
        Standard deviation of the normal initialisation.
    seed : int, default=42
        Random seed for the initialisation.  Training itself is deterministic.
    n_jobs : int, default=1
        Threads used per optimizer pass.  ``-1`` uses all CPUs.
    verbose : bool, default=False
        Print per-epoch progress.
    """

    def __init__(
        self,
        factors: int = 10,
        c_pos: float = 1.0,
        regularization: float = 0.015,
        iterations: int = 15,
        init_mean: float = 0.0,
        init_stdev: float = 0.1,
        seed: int = 42,
        n_jobs: int = 1,
        verbose: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.config = WRMFConfig(
            num_factors=factors,
            c_pos=c_pos,
            regularization=regularization,
            num_iter=iterations,
            init_mean=init_mean,
            init_stdev=init_stdev,
        )
        _core.check_n_jobs(n_jobs)
        self.seed = seed
        self.n_jobs = n_jobs
        self.verbose = verbose
        self._state: ModelState | None = None
        self.iterations_run: int = 0
        self.fitted: bool = False

    @classmethod
    def from_config(cls, config: WRMFConfig, **kwargs: Any) -> WRMF:
        """Build a model from an existing :class:`WRMFConfig`."""
        return cls(
            factors=config.num_factors,
            c_pos=config.c_pos,
            regularization=config.regularization,
            iterations=config.num_iter,
            init_mean=config.init_mean,
            init_stdev=config.init_stdev,
            **kwargs,
        )

    @property
    def factors(self) -> int:
        return self.config.num_factors

    @property
    def c_pos(self) -> float:
        return self.config.c_pos

    @property
    def regularization(self) -> float:
        return self.config.regularization

    @property
    def iterations(self) -> int:
        return self.config.num_iter

    def __repr__(self) -> str:
        return (
            f"WRMF(factors={self.factors}, c_pos={self.c_pos}, "
            f"regularization={self.regularization}, iterations={self.iterations})"
        )

    def __str__(self) -> str:
        return str(self.config)

    # ── fit ────────────────────────────────────────────────────────────

    def fit(
        self,
        interactions: Any = None,
        callback: Callable[[int, WRMF], bool | None] | None = None,
    ) -> WRMF:
        """Fit the model to a user-item interaction matrix.

        Parameters
        ----------
        interactions : sparse matrix or numpy array, optional
            User × item matrix; any non-zero entry is an observation.  If
            *None*, uses the matrix prepared by ``from_transactions()``.
        callback : callable, optional
            Called as ``callback(iteration, model)`` after every epoch.
            Returning ``False`` stops training; it is never called mid-epoch.

        Returns
        -------
        WRMF
            The fitted model.
        """
        if self.fitted:
            raise RuntimeError("Model is already fitted. Create a new instance to refit.")

        if interactions is None:
            if self._prepared_interactions is None:
                raise ValueError("No interactions provided. Pass a matrix or use from_transactions() first.")
            matrix = self._prepared_interactions
        else:
            matrix = InteractionMatrix(interactions)
            # labels from from_transactions() describe a different matrix
            self._user_labels = None
            self._item_labels = None
            self.item_names = None

        self._prepared_interactions = matrix
        self._state = _core.init_state(matrix, self.config, seed=self.seed)
        self.fitted = True

        if self.verbose:
            n_users, n_items = matrix.shape
            print(
                f"[{time.strftime('%X')}] Fitting {self} on {n_users} users x {n_items} items "
                f"({matrix.nnz} interactions)"
            )

        try:
            for it in range(self.config.num_iter):
                self.iterate()
                if callback is not None and callback(it, self) is False:
                    if self.verbose:
                        print(f"[{time.strftime('%X')}] Stopped by callback after {it + 1} iterations.")
                    break
        except BaseException:
            self._state = None
            self.iterations_run = 0
            self.fitted = False
            raise

        return self

    def iterate(self) -> WRMF:
        """Run one more ALS epoch on a fitted model."""
        self._check_fitted()
        assert self._state is not None

        t0 = time.perf_counter()
        _core.iterate(self._state, n_jobs=self.n_jobs)
        self.iterations_run += 1

        if self.verbose:
            elapsed = time.perf_counter() - t0
            print(f"[{time.strftime('%X')}] WRMF iteration {self.iterations_run} done in {elapsed:.2f}s")
        return self

    def compute_fit(self) -> float:
        """Not supported: always returns ``wrmf.FIT_UNAVAILABLE`` (``-1.0``)."""
        return _core.compute_fit()

    # ── helpers ────────────────────────────────────────────────────────

    def _check_fitted(self) -> None:
        if not self.fitted:
            raise RuntimeError("Model has not been fitted yet. Call .fit() first.")

    @property
    def user_factors(self) -> np.ndarray:
        """User factor matrix (n_users, factors)."""
        self._check_fitted()
        assert self._state is not None
        return self._state.user_factors

    @property
    def item_factors(self) -> np.ndarray:
        """Item factor matrix (n_items, factors)."""
        self._check_fitted()
        assert self._state is not None
        return self._state.item_factors
