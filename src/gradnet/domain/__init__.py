from ._errors import (
    ArityMismatchError,
    BackendMismatchError,
    BackendReleasedError,
    BackendUnavailableError,
    DimensionMismatchError,
    InvalidOutputCardinalityError,
    RankError,
    ShapeError,
    ShapeMismatchError,
)
from ._shape import Shape, ShapeLike
from ._backend import IBackend, IPayload, IPrimitiveExecutor
from ._node import IGraphNode
from ._module import IModule
from ._optimizers import IOptimizer

__all__ = [
    "ArityMismatchError",
    "BackendMismatchError",
    "BackendReleasedError",
    "BackendUnavailableError",
    "DimensionMismatchError",
    "InvalidOutputCardinalityError",
    "RankError",
    "ShapeError",
    "ShapeMismatchError",
    "Shape",
    "ShapeLike",
    "IBackend",
    "IPayload",
    "IPrimitiveExecutor",
    "IGraphNode",
    "IModule",
    "IOptimizer",
]
