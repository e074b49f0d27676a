"""
gradnet: reverse-mode automatic differentiation over scalars and
backend-bound tensors, with small MLP building blocks.

Commonly used names are re-exported here; the full surface lives in
`gradnet.domain` (contracts and errors) and `gradnet.infrastructure`.
"""

from .domain import (
    ArityMismatchError,
    BackendMismatchError,
    BackendReleasedError,
    BackendUnavailableError,
    DimensionMismatchError,
    InvalidOutputCardinalityError,
    RankError,
    Shape,
    ShapeError,
    ShapeMismatchError,
)
from .infrastructure import (
    MLP,
    SGD,
    CpuBackend,
    CudaBackend,
    GradnetConfig,
    Layer,
    Neuron,
    Tensor,
    TensorLayer,
    TensorMLP,
    TensorNeuron,
    TensorValue,
    Value,
    create_backend,
    default_backend,
    mean_squared_error,
    squared_error,
)

__version__ = "0.1.0"

__all__ = [
    "ArityMismatchError",
    "BackendMismatchError",
    "BackendReleasedError",
    "BackendUnavailableError",
    "DimensionMismatchError",
    "InvalidOutputCardinalityError",
    "RankError",
    "Shape",
    "ShapeError",
    "ShapeMismatchError",
    "MLP",
    "SGD",
    "CpuBackend",
    "CudaBackend",
    "GradnetConfig",
    "Layer",
    "Neuron",
    "Tensor",
    "TensorLayer",
    "TensorMLP",
    "TensorNeuron",
    "TensorValue",
    "Value",
    "create_backend",
    "default_backend",
    "mean_squared_error",
    "squared_error",
]
