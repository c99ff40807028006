from __future__ import annotations

from typing import Any


def to_dataframe(data: Any) -> Any:
    """Coerce PyArrow tables to a zero-copy Polars DataFrame; return everything else unchanged."""
    mod = getattr(type(data), "__module__", "") or ""

    if type(data).__name__ == "Table" and mod.startswith("pyarrow"):
        from ._dependencies import import_optional_dependency

        pl = import_optional_dependency("polars", extra="Needed to read pyarrow tables.")

        return pl.from_arrow(data)

    return data


def is_polars_frame(data: Any) -> bool:
    """True if ``data`` is a ``polars.DataFrame``, without importing polars when it is absent."""
    mod = getattr(type(data), "__module__", "") or ""
    if not mod.startswith("polars"):
        return False
    import polars as pl

    return isinstance(data, pl.DataFrame)
