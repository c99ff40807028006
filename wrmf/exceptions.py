"""Exception hierarchy for wrmf."""

from __future__ import annotations

import numpy as np


class WRMFError(Exception):
    """Base class for all errors raised by wrmf."""


class ConfigurationError(WRMFError, ValueError):
    """Raised when hyperparameters are invalid (e.g. ``num_factors <= 0``)."""


class SingularSystemError(WRMFError, np.linalg.LinAlgError):
    """Raised when a per-row system ``G + C_u + λI`` is not positive definite.

    Only possible with ``regularization == 0`` and a row whose observed
    entries do not span the factor space.  Use ``regularization > 0``.
    """


class DimensionMismatchError(WRMFError, ValueError):
    """Raised when the interaction matrix and the factor matrices disagree on shape."""
