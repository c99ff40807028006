"""Immutable hyperparameter configuration for WRMF training."""

from __future__ import annotations

import dataclasses
import math
import numbers
import warnings
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class WRMFConfig:
    """Hyperparameters of a WRMF training run.

    Built once before training and never mutated, so row solves running on
    several threads can share it freely.

    Attributes
    ----------
    num_factors : int, default=10
        Number of latent factors ``F``.
    c_pos : float, default=1.0
        Confidence weight applied to observed entries (the ``alpha`` of
        Hu et al.).
    regularization : float, default=0.015
        Ridge penalty ``λ`` added to the diagonal of every per-row system.
        Must be strictly positive when some user or item has no observed
        entries.
    num_iter : int, default=15
        Number of epochs run by :meth:`wrmf.WRMF.fit`.
    init_mean : float, default=0.0
        Mean of the normal distribution used to initialise the factors.
    init_stdev : float, default=0.1
        Standard deviation of the normal distribution used to initialise
        the factors.

    Raises
    ------
    ConfigurationError
        If any value is out of range.
    """

    num_factors: int = 10
    c_pos: float = 1.0
    regularization: float = 0.015
    num_iter: int = 15
    init_mean: float = 0.0
    init_stdev: float = 0.1

    def __post_init__(self) -> None:
        if isinstance(self.num_factors, bool) or not isinstance(self.num_factors, numbers.Integral):
            raise ConfigurationError(f"num_factors must be an integer, got {self.num_factors!r}.")
        if self.num_factors <= 0:
            raise ConfigurationError(f"num_factors must be positive, got {self.num_factors}.")
        if isinstance(self.num_iter, bool) or not isinstance(self.num_iter, numbers.Integral):
            raise ConfigurationError(f"num_iter must be an integer, got {self.num_iter!r}.")
        if self.num_iter < 1:
            raise ConfigurationError(f"num_iter must be at least 1, got {self.num_iter}.")
        for name in ("c_pos", "regularization", "init_mean", "init_stdev"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise ConfigurationError(f"{name} must be a finite number, got {value!r}.")
        if self.c_pos < 0:
            raise ConfigurationError(f"c_pos must be non-negative, got {self.c_pos}.")
        if self.regularization < 0:
            raise ConfigurationError(f"regularization must be non-negative, got {self.regularization}.")
        if self.init_stdev < 0:
            raise ConfigurationError(f"init_stdev must be non-negative, got {self.init_stdev}.")

        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "num_factors", int(self.num_factors))
        object.__setattr__(self, "num_iter", int(self.num_iter))
        for name in ("c_pos", "regularization", "init_mean", "init_stdev"):
            object.__setattr__(self, name, float(getattr(self, name)))

        if self.regularization == 0:
            warnings.warn(
                "regularization=0 makes the row system singular for users or items "
                "without observed entries; training will fail on such rows.",
                UserWarning,
                stacklevel=3,
            )

    def replace(self, **changes: Any) -> WRMFConfig:
        """Return a new, validated config with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        return (
            f"WRMF num_factors={self.num_factors} regularization={self.regularization:g} "
            f"c_pos={self.c_pos:g} num_iter={self.num_iter} "
            f"init_mean={self.init_mean:g} init_stdev={self.init_stdev:g}"
        )
