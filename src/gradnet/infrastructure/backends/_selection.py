"""
Backend construction and fallback policy.

The engine itself never chooses a substrate. This module holds the
caller-level policy: build the requested backend, and for ``"auto"`` try
CUDA first and fall back to the host backend when the accelerator cannot be
initialized.
"""

from __future__ import annotations

import logging
import threading
import warnings
from typing import Optional

from ...domain._errors import BackendUnavailableError
from .._config import BACKEND_KINDS, GradnetConfig
from ._base import BackendBase
from ._cpu_backend import CpuBackend
from ._cuda_backend import CudaBackend

logger = logging.getLogger(__name__)

_default_lock = threading.Lock()
_default: Optional[CpuBackend] = None


def create_backend(
    kind: Optional[str] = None, *, config: Optional[GradnetConfig] = None
) -> BackendBase:
    """
    Construct a backend instance.

    Parameters
    ----------
    kind : Optional[str], optional
        ``"cpu"``, ``"cuda"`` or ``"auto"``. Defaults to ``config.backend``.
    config : Optional[GradnetConfig], optional
        Runtime configuration. When omitted, `GradnetConfig.from_env()` is
        read only if `kind` is omitted or an accelerator is requested.

    Returns
    -------
    BackendBase
        A new backend owned by the caller.

    Raises
    ------
    ValueError
        If `kind` is not a known backend kind.
    BackendUnavailableError
        If ``kind == "cuda"`` and the accelerator cannot be initialized.

    Notes
    -----
    With ``kind == "auto"`` an initialization failure emits a
    `RuntimeWarning` and returns a `CpuBackend`.
    """
    cfg = config
    if kind is None:
        cfg = cfg or GradnetConfig.from_env()
        kind = cfg.backend
    k = kind.strip().lower()
    if k not in BACKEND_KINDS:
        raise ValueError(f"Unknown backend '{kind}'. Expected one of {BACKEND_KINDS}.")

    if k == "cpu":
        logger.debug("Creating CPU backend")
        return CpuBackend()
    cfg = cfg or GradnetConfig.from_env()
    if k == "cuda":
        return CudaBackend(config=cfg)

    try:
        return CudaBackend(config=cfg)
    except BackendUnavailableError as e:
        logger.warning("CUDA backend unavailable, falling back to CPU: %s", e.reason)
        warnings.warn(
            "gradnet CUDA backend could not be initialized; "
            f"falling back to the CPU backend. Reason: {e.reason}",
            RuntimeWarning,
            stacklevel=2,
        )
        return CpuBackend()


def default_backend() -> CpuBackend:
    """
    Return the process-wide host backend used when callers pass none.

    A fresh instance is created if the previous default was closed.
    """
    global _default
    with _default_lock:
        if _default is None or _default.closed:
            _default = CpuBackend()
        return _default
