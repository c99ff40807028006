from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl
    import pyarrow as pa

    DataFrameType = pd.DataFrame | pl.DataFrame | pa.Table
else:
    DataFrameType = Any


class InteractionView(Protocol):
    """Read contract of a boolean user-item matrix, as consumed by the optimizer.

    ``row_entries`` must return the column indices of the observed entries of
    a row: finite, without duplicates, in any order.  The optimizer is called
    once with the matrix and once with its transpose, so both orientations
    must implement this protocol.
    """

    @property
    def shape(self) -> tuple[int, int]: ...

    def row_entries(self, index: int) -> np.ndarray: ...
