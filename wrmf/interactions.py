"""Boolean sparse interaction matrix with row access in both orientations."""

from __future__ import annotations

import typing
from typing import Any

import numpy as np
from scipy import sparse as sp


class InteractionMatrix:
    """Immutable boolean user × item matrix of observed interactions.

    Any non-zero value of the input counts as an observation; weights and
    ratings are discarded.  Rows are stored as a canonical CSR matrix so that
    :meth:`row_entries` is a zero-copy slice of ``indices``.

    Parameters
    ----------
    interactions : scipy sparse matrix or numpy.ndarray
        2-D matrix with users as rows and items as columns.
    """

    def __init__(self, interactions: Any) -> None:
        if isinstance(interactions, InteractionMatrix):
            csr = interactions._csr
        elif sp.issparse(interactions):
            csr = sp.csr_matrix(interactions)
        elif isinstance(interactions, np.ndarray):
            if interactions.ndim != 2:
                raise ValueError(f"Expected a 2-D array, got an array with {interactions.ndim} dimension(s).")
            csr = sp.csr_matrix(interactions)
        else:
            raise TypeError(f"Expected scipy sparse matrix or numpy array, got {type(interactions)}")

        csr = csr.copy()
        if not csr.has_canonical_format:
            csr.sum_duplicates()
        csr.eliminate_zeros()
        csr = csr.astype(bool)
        csr.sort_indices()

        self._csr: sp.csr_matrix = csr
        self._transposed: InteractionMatrix | None = None

    @classmethod
    def _from_canonical(cls, csr: sp.csr_matrix) -> InteractionMatrix:
        instance = cls.__new__(cls)
        instance._csr = csr
        instance._transposed = None
        return instance

    def __repr__(self) -> str:
        return f"InteractionMatrix(shape={self.shape}, nnz={self.nnz})"

    @property
    def shape(self) -> tuple[int, int]:
        return typing.cast(tuple[int, int], self._csr.shape)

    @property
    def n_rows(self) -> int:
        return self.shape[0]

    @property
    def n_cols(self) -> int:
        return self.shape[1]

    @property
    def nnz(self) -> int:
        return int(self._csr.nnz)

    def row_entries(self, index: int) -> np.ndarray:
        """Column indices of the observed entries in row ``index`` (sorted, unique, read-only)."""
        if index < 0 or index >= self.n_rows:
            raise IndexError(f"Row {index} is out of bounds for a matrix with {self.n_rows} rows.")
        start, end = self._csr.indptr[index], self._csr.indptr[index + 1]
        entries = self._csr.indices[start:end]
        entries.flags.writeable = False
        return entries

    def transpose(self) -> InteractionMatrix:
        """Item × user view of the same interactions.  Built once and cached."""
        if self._transposed is None:
            t = self._csr.T.tocsr()
            t.sort_indices()
            self._transposed = InteractionMatrix._from_canonical(t)
            self._transposed._transposed = self
        return self._transposed

    @property
    def T(self) -> InteractionMatrix:
        return self.transpose()

    def to_csr(self) -> sp.csr_matrix:
        """Return a copy of the underlying boolean CSR matrix."""
        return self._csr.copy()

    def __getstate__(self) -> dict[str, Any]:
        # the cached transpose references self; rebuild it lazily after unpickling
        return {"_csr": self._csr, "_transposed": None}
