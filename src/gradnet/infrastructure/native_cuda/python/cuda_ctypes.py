"""
ctypes binding layer for the gradnet CUDA native library.

`CudaLib` wraps a loaded `ctypes.CDLL` and exposes the primitive-executor
surface (`IPrimitiveExecutor`) the CUDA backend dispatches to:

- memory: ``gradnet_cuda_set_device``, ``gradnet_cuda_malloc``,
  ``gradnet_cuda_free``, ``gradnet_cuda_memcpy_h2d``,
  ``gradnet_cuda_memcpy_d2h``, ``gradnet_cuda_memset``,
  ``gradnet_cuda_synchronize``
- kernels: see `ops.elementwise_ctypes` and `ops.matmul_ctypes`

Design notes
------------
- Device pointers are ``uintptr_t`` values carried as Python ints.
- Every export returns an int status; non-zero raises `RuntimeError`
  naming the symbol and status.
- Only float32 buffers are supported.
- This class does not manage allocations; the backend owns every pointer
  it obtains through `malloc` and frees it exactly once.
"""

from __future__ import annotations

import ctypes
from ctypes import c_int, c_size_t, c_uint64, c_void_p

import numpy as np

from .ops import (
    add_cuda,
    matmul_cuda,
    mul_cuda,
    relu_cuda,
    sgd_update_cuda,
    tanh_cuda,
)

DevPtr = int


class CudaLib:
    """
    Thin binding layer around the gradnet CUDA native library.

    Parameters
    ----------
    lib : ctypes.CDLL
        Loaded native library handle.
    """

    def __init__(self, lib: ctypes.CDLL) -> None:
        self.lib = lib
        self._utils_bound = False

    def _bind_cuda_utils(self) -> None:
        """Bind argtypes/restype for CUDA utility exports (idempotent)."""
        if self._utils_bound:
            return

        lib = self.lib
        lib.gradnet_cuda_set_device.argtypes = [c_int]
        lib.gradnet_cuda_set_device.restype = c_int

        lib.gradnet_cuda_malloc.argtypes = [ctypes.POINTER(c_uint64), c_size_t]
        lib.gradnet_cuda_malloc.restype = c_int

        lib.gradnet_cuda_free.argtypes = [c_uint64]
        lib.gradnet_cuda_free.restype = c_int

        lib.gradnet_cuda_memcpy_h2d.argtypes = [c_uint64, c_void_p, c_size_t]
        lib.gradnet_cuda_memcpy_h2d.restype = c_int

        lib.gradnet_cuda_memcpy_d2h.argtypes = [c_void_p, c_uint64, c_size_t]
        lib.gradnet_cuda_memcpy_d2h.restype = c_int

        lib.gradnet_cuda_memset.argtypes = [c_uint64, c_int, c_size_t]
        lib.gradnet_cuda_memset.restype = c_int

        lib.gradnet_cuda_synchronize.argtypes = []
        lib.gradnet_cuda_synchronize.restype = c_int

        self._utils_bound = True

    # ----------------------------
    # CUDA utils
    # ----------------------------

    def set_device(self, device: int = 0) -> None:
        self._bind_cuda_utils()
        st = self.lib.gradnet_cuda_set_device(int(device))
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_set_device failed with status={st}")

    def malloc(self, nbytes: int) -> DevPtr:
        """
        Allocate device memory.

        Returns
        -------
        DevPtr
            Device pointer handle (uintptr_t as Python int).

        Raises
        ------
        RuntimeError
            If allocation fails.
        """
        self._bind_cuda_utils()
        out = c_uint64(0)
        st = self.lib.gradnet_cuda_malloc(ctypes.byref(out), c_size_t(int(nbytes)))
        if st != 0 or out.value == 0:
            raise RuntimeError(
                f"gradnet_cuda_malloc failed with status={st}, nbytes={nbytes}"
            )
        return int(out.value)

    def free(self, dev_ptr: DevPtr) -> None:
        self._bind_cuda_utils()
        st = self.lib.gradnet_cuda_free(c_uint64(int(dev_ptr)))
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_free failed with status={st}")

    def memcpy_htod(self, dst_dev: DevPtr, src_host: np.ndarray) -> None:
        """
        Copy a float32 host array to a device buffer.

        Non-contiguous inputs are copied into a contiguous buffer first.
        """
        self._bind_cuda_utils()
        if src_host.dtype != np.float32:
            raise TypeError(f"memcpy_htod expects float32, got {src_host.dtype}")
        if not src_host.flags["C_CONTIGUOUS"]:
            src_host = np.ascontiguousarray(src_host)
        st = self.lib.gradnet_cuda_memcpy_h2d(
            c_uint64(int(dst_dev)),
            c_void_p(src_host.ctypes.data),
            c_size_t(int(src_host.nbytes)),
        )
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_memcpy_h2d failed with status={st}")

    def memcpy_dtoh(self, dst_host: np.ndarray, src_dev: DevPtr) -> None:
        """
        Copy a device buffer into a preallocated C-contiguous float32 array.
        """
        self._bind_cuda_utils()
        if dst_host.dtype != np.float32 or not dst_host.flags["C_CONTIGUOUS"]:
            raise TypeError("memcpy_dtoh expects a C-contiguous float32 array")
        st = self.lib.gradnet_cuda_memcpy_d2h(
            c_void_p(dst_host.ctypes.data),
            c_uint64(int(src_dev)),
            c_size_t(int(dst_host.nbytes)),
        )
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_memcpy_d2h failed with status={st}")

    def memset_zero(self, dev_ptr: DevPtr, nbytes: int) -> None:
        self._bind_cuda_utils()
        st = self.lib.gradnet_cuda_memset(
            c_uint64(int(dev_ptr)), c_int(0), c_size_t(int(nbytes))
        )
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_memset failed with status={st}")

    def synchronize(self) -> None:
        self._bind_cuda_utils()
        st = self.lib.gradnet_cuda_synchronize()
        if st != 0:
            raise RuntimeError(f"gradnet_cuda_synchronize failed with status={st}")

    # ----------------------------
    # Kernels
    # ----------------------------

    def add(self, a_dev: DevPtr, b_dev: DevPtr, y_dev: DevPtr, numel: int) -> None:
        add_cuda(self.lib, a_dev=a_dev, b_dev=b_dev, y_dev=y_dev, numel=numel)

    def mul(self, a_dev: DevPtr, b_dev: DevPtr, y_dev: DevPtr, numel: int) -> None:
        mul_cuda(self.lib, a_dev=a_dev, b_dev=b_dev, y_dev=y_dev, numel=numel)

    def tanh(self, x_dev: DevPtr, y_dev: DevPtr, numel: int) -> None:
        tanh_cuda(self.lib, x_dev=x_dev, y_dev=y_dev, numel=numel)

    def relu(self, x_dev: DevPtr, y_dev: DevPtr, numel: int) -> None:
        relu_cuda(self.lib, x_dev=x_dev, y_dev=y_dev, numel=numel)

    def matmul(
        self, a_dev: DevPtr, b_dev: DevPtr, c_dev: DevPtr, M: int, N: int, K: int
    ) -> None:
        matmul_cuda(self.lib, a_dev=a_dev, b_dev=b_dev, c_dev=c_dev, M=M, N=N, K=K)

    def sgd_update(self, x_dev: DevPtr, g_dev: DevPtr, lr: float, numel: int) -> None:
        sgd_update_cuda(self.lib, x_dev=x_dev, g_dev=g_dev, lr=lr, numel=numel)
