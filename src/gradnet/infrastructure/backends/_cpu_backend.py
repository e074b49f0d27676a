"""
Reference host backend (NumPy).

`CpuBackend` stores every payload as a flat float32 NumPy array and computes
each primitive synchronously on the host. It is the numerical reference the
accelerated backend is checked against.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ._base import BackendBase


class CpuBackend(BackendBase):
    """
    Host implementation of the backend contract.

    Notes
    -----
    - Storage handles are 1-D C-contiguous float32 arrays.
    - Results are always freshly allocated; inputs are never aliased.
    - `_free` drops the reference and lets NumPy reclaim the buffer.
    """

    name = "cpu"

    def _alloc(self, numel: int, host: Optional[np.ndarray]) -> np.ndarray:
        if host is None:
            return np.zeros(numel, dtype=np.float32)
        return host.astype(np.float32, copy=True)

    def _free(self, handle: np.ndarray) -> None:
        pass

    def _to_host(self, handle: np.ndarray, numel: int) -> np.ndarray:
        return handle.copy()

    def _update(
        self, handle: np.ndarray, grad: np.ndarray, lr: float, numel: int
    ) -> None:
        handle -= np.float32(lr) * grad

    def _add(self, ha: np.ndarray, hb: np.ndarray, numel: int) -> np.ndarray:
        return ha + hb

    def _mul(self, ha: np.ndarray, hb: np.ndarray, numel: int) -> np.ndarray:
        return ha * hb

    def _matmul(
        self, ha: np.ndarray, hb: np.ndarray, M: int, N: int, K: int
    ) -> np.ndarray:
        a = ha.reshape(M, K)
        b = hb.reshape(K, N)
        return np.ascontiguousarray(a @ b, dtype=np.float32).reshape(-1)

    def _tanh(self, hx: np.ndarray, numel: int) -> np.ndarray:
        return np.tanh(hx)

    def _relu(self, hx: np.ndarray, numel: int) -> np.ndarray:
        return np.maximum(hx, np.float32(0.0))
