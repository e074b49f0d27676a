from ._base import BackendBase
from ._cpu_backend import CpuBackend
from ._cuda_backend import CudaBackend
from ._selection import create_backend, default_backend

__all__ = [
    "BackendBase",
    "CpuBackend",
    "CudaBackend",
    "create_backend",
    "default_backend",
]
