from __future__ import annotations

import pickle
import warnings
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from .typing import DataFrameType

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl
    from typing_extensions import Self

    from .interactions import InteractionMatrix

#: Bumped whenever the pickled layout of a model changes.
FORMAT_VERSION = 1


class BaseModel(ABC):
    """Pickle persistence shared by wrmf models.

    A saved file holds a small envelope around the instance ``__dict__``;
    :meth:`load` refuses anything without it.
    """

    def __dir__(self) -> list[str]:
        return [k for k in super().__dir__() if not k.startswith("_")]

    def save(self, path: str | Path) -> None:
        """Save the model to disk.

        Parameters
        ----------
        path : str or Path
            File path to write the model to (e.g. ``"model.pkl"``).  Missing
            parent directories are created.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "__wrmf_version__": FORMAT_VERSION,
            "class": type(self).__name__,
            "state": self.__dict__,
        }
        with open(path, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """Load a model written by :meth:`save`.

        Raises
        ------
        TypeError
            If the file was not written by :meth:`save`.
        ValueError
            If the file was written by a newer, incompatible version.
        """
        with open(Path(path), "rb") as f:
            payload = pickle.load(f)  # noqa: S301

        if not (isinstance(payload, dict) and "__wrmf_version__" in payload):
            raise TypeError(f"Expected {cls.__name__}, got {type(payload).__name__}")
        if payload["__wrmf_version__"] > FORMAT_VERSION:
            raise ValueError(
                f"Model file has format version {payload['__wrmf_version__']}; "
                f"this wrmf reads up to version {FORMAT_VERSION}."
            )

        saved_cls_name = payload.get("class", "")
        if saved_cls_name != cls.__name__:
            warnings.warn(
                f"Model was saved as {saved_cls_name} but loaded as {cls.__name__}. "
                "This may cause unexpected behaviour.",
                stacklevel=2,
            )

        instance = cls.__new__(cls)
        instance.__dict__.update(payload["state"])
        return instance


class ImplicitRecommender(BaseModel):
    """Base class for latent-factor models trained on implicit feedback.

    Subclasses implement :meth:`fit` and the two factor properties; scoring
    is the dot product of a user row and an item row.  Event logs are turned
    into an :class:`~wrmf.InteractionMatrix` by :meth:`from_transactions`.
    """

    def __init__(self, **kwargs: Any):
        self._user_labels: list[Any] | None = None
        self._item_labels: list[Any] | None = None
        self.item_names: list[Any] | None = None
        self._prepared_interactions: InteractionMatrix | None = None

    @classmethod
    def from_transactions(
        cls,
        data: DataFrameType,
        user_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """Initialize the model from a long-format DataFrame.

        Prepares the interaction matrix but does **not** fit the model.
        Call ``.fit()`` explicitly to train.

        Parameters
        ----------
        data : pd.DataFrame | pl.DataFrame | pyarrow.Table
            Event log with one row per (user, item) interaction.
        user_col : str, optional
            Column name identifying the user.  Defaults to the first column.
        item_col : str, optional
            Column name identifying the item.  Defaults to the second column.
        verbose : int, optional
            Verbosity level.
        **kwargs
            Model hyperparameters passed to ``__init__``.
        """
        model = cls(verbose=bool(verbose), **kwargs)
        return model._prepare_transactions(data, user_col, item_col)

    @classmethod
    def from_pandas(
        cls,
        df: pd.DataFrame,
        user_col: str | None = None,
        item_col: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Shorthand for ``from_transactions(df, user_col, item_col)``."""
        return cls.from_transactions(df, user_col=user_col, item_col=item_col, **kwargs)

    @classmethod
    def from_polars(
        cls,
        df: pl.DataFrame,
        user_col: str | None = None,
        item_col: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Shorthand for ``from_transactions(df, user_col, item_col)``."""
        return cls.from_transactions(df, user_col=user_col, item_col=item_col, **kwargs)

    @classmethod
    def from_arrow(
        cls,
        table: Any,
        user_col: str | None = None,
        item_col: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Shorthand for ``from_transactions(table, user_col, item_col)`` on a ``pyarrow.Table``."""
        return cls.from_transactions(table, user_col=user_col, item_col=item_col, **kwargs)

    def _prepare_transactions(
        self,
        data: DataFrameType,
        user_col: str | None = None,
        item_col: str | None = None,
    ) -> Self:
        """Prepare the interaction matrix from a long-format DataFrame without fitting."""
        import pandas as _pd
        from scipy import sparse as sp

        from ._compat import is_polars_frame, to_dataframe
        from .interactions import InteractionMatrix

        data = to_dataframe(data)
        is_polars = is_polars_frame(data)

        if not (isinstance(data, _pd.DataFrame) or is_polars):
            raise TypeError(f"Expected Pandas/Polars DataFrame or PyArrow Table, got {type(data)}")

        cols = list(data.columns)
        if len(cols) < 2 and (user_col is None or item_col is None):
            raise ValueError("Expected at least two columns (user, item) in the event log.")
        u_col = user_col or str(cols[0])
        i_col = item_col or str(cols[1])

        u_data = data[u_col].to_numpy() if is_polars else data[u_col]
        i_data = data[i_col].to_numpy() if is_polars else data[i_col]

        user_codes, user_uniques = _pd.factorize(u_data, sort=False)
        item_codes, item_uniques = _pd.factorize(i_data, sort=True)
        if (user_codes < 0).any() or (item_codes < 0).any():
            raise ValueError(f"Columns {u_col!r} and {i_col!r} must not contain missing values.")

        n_users = len(user_uniques)
        n_items = len(item_uniques)
        csr = sp.csr_matrix(
            (np.ones(len(user_codes), dtype=np.float32), (user_codes.astype(np.int64), item_codes.astype(np.int64))),
            shape=(n_users, n_items),
        )
        self._user_labels = list(user_uniques)
        self._item_labels = list(item_uniques)
        self.item_names = self._item_labels
        self._prepared_interactions = InteractionMatrix(csr)
        return self

    @abstractmethod
    def fit(self, interactions: Any = None) -> Self:
        """Fit the model to a user-item interaction matrix.

        Must be implemented by subclasses.
        """
        pass

    @property
    @abstractmethod
    def user_factors(self) -> np.ndarray:
        """User factor matrix (n_users, factors)."""

    @property
    @abstractmethod
    def item_factors(self) -> np.ndarray:
        """Item factor matrix (n_items, factors)."""

    def predict(self, user_id: int, item_id: int) -> float:
        """Predicted preference of ``user_id`` for ``item_id`` (dot product of their factors)."""
        W, H = self.user_factors, self.item_factors
        if user_id < 0 or user_id >= W.shape[0]:
            raise ValueError(f"user_id {user_id} is out of bounds for model with {W.shape[0]} users.")
        if item_id < 0 or item_id >= H.shape[0]:
            raise ValueError(f"item_id {item_id} is out of bounds for model with {H.shape[0]} items.")
        return float(W[user_id] @ H[item_id])

    def _seen_items(self, user_id: int) -> np.ndarray:
        if self._prepared_interactions is None:
            return np.array([], dtype=np.int32)
        return self._prepared_interactions.row_entries(user_id)

    def recommend_items(
        self,
        user_id: int,
        n: int = 10,
        exclude_seen: bool = True,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Top-N items for a user.

        Parameters
        ----------
        user_id : int
            Internal user index.
        n : int, default=10
            Number of items to return.
        exclude_seen : bool, default=True
            Whether to exclude items the user interacted with during fit.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            ``(item_ids, scores)`` sorted by descending score.
        """
        W, H = self.user_factors, self.item_factors
        if user_id < 0 or user_id >= W.shape[0]:
            raise ValueError(f"user_id {user_id} is out of bounds for model with {W.shape[0]} users.")

        scores = H @ W[user_id]
        candidates = np.arange(H.shape[0])
        if exclude_seen:
            candidates = np.setdiff1d(candidates, self._seen_items(user_id), assume_unique=True)

        order = np.argsort(-scores[candidates], kind="stable")[:n]
        top_n = candidates[order]
        return top_n.astype(np.intp), scores[top_n]

    def recommend_users(self, item_id: int, n: int = 10) -> tuple[np.ndarray, np.ndarray]:
        """Top-N users for an item.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            ``(user_ids, scores)`` sorted by descending score.
        """
        W, H = self.user_factors, self.item_factors
        if item_id < 0 or item_id >= H.shape[0]:
            raise ValueError(f"item_id {item_id} is out of bounds for model with {H.shape[0]} items.")

        scores = W @ H[item_id]
        top_n = np.argsort(-scores, kind="stable")[:n]
        return top_n.astype(np.intp), scores[top_n]
