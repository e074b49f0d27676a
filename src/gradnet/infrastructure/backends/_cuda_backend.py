"""
Accelerated backend dispatching to a CUDA primitive executor.

`CudaBackend` keeps every payload in device memory and forwards each
primitive to an `IPrimitiveExecutor`. By default the executor is `CudaLib`,
the ctypes binding over the ``gradnet_cuda_native`` library; tests and
alternative substrates may pass any object satisfying the protocol.

Synchronous contract
--------------------
Kernels may run on many data-parallel threads internally, but every public
call returns only after `synchronize()`, so the graph engine always sees a
blocking substrate.

Ownership
---------
Device pointers are owned by the backend. Temporary buffers (e.g. the
uploaded gradient of `update_in_place`) are freed before the call returns.
`close()` frees every outstanding allocation before the executor handle is
dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import numpy as np

from ...domain._backend import IPrimitiveExecutor
from ...domain._errors import BackendUnavailableError
from .._config import GradnetConfig
from ..native_cuda.python._native_loader import load_gradnet_cuda_native
from ..native_cuda.python.cuda_ctypes import CudaLib
from ._base import BackendBase

logger = logging.getLogger(__name__)

_ITEMSIZE = np.dtype(np.float32).itemsize


def _load_executor(config: GradnetConfig) -> CudaLib:
    """
    Load the native library named by `config` and select its device.

    Raises
    ------
    BackendUnavailableError
        If the library is missing, fails to load, lacks the expected
        exports, or cannot select the configured device.
    """
    try:
        lib = load_gradnet_cuda_native(
            str(config.cuda_native_path),
            str(config.cuda_toolkit_path) if config.cuda_toolkit_path else None,
        )
        executor = CudaLib(lib)
        executor.set_device(config.cuda_device)
    except (OSError, AttributeError, RuntimeError) as e:
        raise BackendUnavailableError("cuda", str(e)) from e
    return executor


class CudaBackend(BackendBase):
    """
    CUDA implementation of the backend contract.

    Parameters
    ----------
    executor : Optional[IPrimitiveExecutor], optional
        Primitive executor to dispatch to. When omitted, the native library
        is loaded according to `config`.
    config : Optional[GradnetConfig], optional
        Configuration used to locate the native library. Defaults to
        `GradnetConfig.from_env()`.

    Raises
    ------
    BackendUnavailableError
        If no usable executor can be created.
    TypeError
        If `executor` does not satisfy `IPrimitiveExecutor`.
    """

    name = "cuda"

    def __init__(
        self,
        executor: Optional[IPrimitiveExecutor] = None,
        *,
        config: Optional[GradnetConfig] = None,
    ) -> None:
        super().__init__()
        if executor is None:
            executor = _load_executor(config or GradnetConfig.from_env())
        elif not isinstance(executor, IPrimitiveExecutor):
            raise TypeError(
                f"executor must satisfy IPrimitiveExecutor, got {type(executor)!r}"
            )
        self._executor: Optional[IPrimitiveExecutor] = executor
        logger.debug("CUDA backend initialized with %s", type(executor).__name__)

    @property
    def executor(self) -> IPrimitiveExecutor:
        self._check_open()
        return self._executor

    # ------------------------------------------------------------------
    # Storage hooks
    # ------------------------------------------------------------------

    def _alloc(self, numel: int, host: Optional[np.ndarray]) -> int:
        ex = self._executor
        nbytes = numel * _ITEMSIZE
        dev = int(ex.malloc(nbytes))
        try:
            if host is None:
                ex.memset_zero(dev, nbytes)
            else:
                ex.memcpy_htod(dev, host)
            ex.synchronize()
        except Exception:
            ex.free(dev)
            raise
        return dev

    def _free(self, handle: int) -> None:
        self._executor.free(int(handle))

    def _to_host(self, handle: int, numel: int) -> np.ndarray:
        out = np.empty(numel, dtype=np.float32)
        self._executor.memcpy_dtoh(out, int(handle))
        return out

    def _update(self, handle: int, grad: np.ndarray, lr: float, numel: int) -> None:
        ex = self._executor
        g_dev = self._alloc(numel, grad)
        try:
            ex.sgd_update(int(handle), g_dev, lr, numel)
            ex.synchronize()
        finally:
            ex.free(g_dev)

    # ------------------------------------------------------------------
    # Kernel hooks
    # ------------------------------------------------------------------

    def _launch(self, numel: int, kernel: Callable[[int], Any]) -> int:
        """
        Allocate an output buffer, run `kernel(out_dev)`, and synchronize.

        The output buffer is freed if the launch fails.
        """
        ex = self._executor
        out = int(ex.malloc(numel * _ITEMSIZE))
        try:
            kernel(out)
            ex.synchronize()
        except Exception:
            ex.free(out)
            raise
        return out

    def _add(self, ha: int, hb: int, numel: int) -> int:
        return self._launch(
            numel, lambda y: self._executor.add(int(ha), int(hb), y, numel)
        )

    def _mul(self, ha: int, hb: int, numel: int) -> int:
        return self._launch(
            numel, lambda y: self._executor.mul(int(ha), int(hb), y, numel)
        )

    def _matmul(self, ha: int, hb: int, M: int, N: int, K: int) -> int:
        return self._launch(
            M * N, lambda c: self._executor.matmul(int(ha), int(hb), c, M, N, K)
        )

    def _tanh(self, hx: int, numel: int) -> int:
        return self._launch(numel, lambda y: self._executor.tanh(int(hx), y, numel))

    def _relu(self, hx: int, numel: int) -> int:
        return self._launch(numel, lambda y: self._executor.relu(int(hx), y, numel))

    def _shutdown(self) -> None:
        self._executor = None
