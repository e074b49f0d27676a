from ._native_loader import load_gradnet_cuda_native
from .cuda_ctypes import CudaLib

__all__ = ["load_gradnet_cuda_native", "CudaLib"]
