from ._core import FIT_UNAVAILABLE, ModelState, compute_fit, init_factors, init_state, iterate, optimize
from ._solver import cholesky_solve, gram_matrix, row_correction, solve_row
from .als import WRMF
from .config import WRMFConfig
from .exceptions import ConfigurationError, DimensionMismatchError, SingularSystemError, WRMFError
from .interactions import InteractionMatrix
from .model import BaseModel, ImplicitRecommender

__all__ = [
    "WRMF",
    "WRMFConfig",
    "InteractionMatrix",
    "ModelState",
    "BaseModel",
    "ImplicitRecommender",
    "optimize",
    "iterate",
    "compute_fit",
    "init_factors",
    "init_state",
    "gram_matrix",
    "row_correction",
    "solve_row",
    "cholesky_solve",
    "FIT_UNAVAILABLE",
    "WRMFError",
    "ConfigurationError",
    "SingularSystemError",
    "DimensionMismatchError",
]
