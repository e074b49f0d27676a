from .elementwise_ctypes import (
    add_cuda,
    mul_cuda,
    relu_cuda,
    sgd_update_cuda,
    tanh_cuda,
)
from .matmul_ctypes import matmul_cuda

__all__ = [
    "add_cuda",
    "mul_cuda",
    "relu_cuda",
    "sgd_update_cuda",
    "tanh_cuda",
    "matmul_cuda",
]
