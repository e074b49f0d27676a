from ._config import GradnetConfig, default_native_library_path
from .tensor import Tensor
from .backends import (
    BackendBase,
    CpuBackend,
    CudaBackend,
    create_backend,
    default_backend,
)
from .autograd import GraphNode, OpKind, TensorValue, Value
from ._networks import Layer, MLP, Neuron
from ._tensor_networks import TensorLayer, TensorMLP, TensorNeuron
from ._losses import mean_squared_error, squared_error
from ._optimizers import SGD

__all__ = [
    "GradnetConfig",
    "default_native_library_path",
    "Tensor",
    "BackendBase",
    "CpuBackend",
    "CudaBackend",
    "create_backend",
    "default_backend",
    "GraphNode",
    "OpKind",
    "TensorValue",
    "Value",
    "Neuron",
    "Layer",
    "MLP",
    "TensorNeuron",
    "TensorLayer",
    "TensorMLP",
    "mean_squared_error",
    "squared_error",
    "SGD",
]
