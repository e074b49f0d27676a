"""
Shared validation and lifetime bookkeeping for compute backends.

`BackendBase` implements the public `IBackend` surface once: shape checks,
ownership checks, closed-state checks and the table of live allocations.
Concrete backends only implement the `_`-prefixed storage and kernel hooks,
so host and accelerated implementations raise identical errors for
identical misuse.

Lifetime model
--------------
- Every payload allocated by a backend is recorded in ``self._live`` under
  its `Tensor.id`, mapped to the raw storage handle.
- A `weakref.finalize` attached to each payload frees its storage when the
  payload is garbage-collected. The finalizer holds a strong reference to
  the backend, so a backend outlives every payload it allocated.
- `close()` frees every outstanding allocation, then retires the backend.
  Later use of the backend or any of its payloads raises
  `BackendReleasedError` instead of touching freed storage.
"""

from __future__ import annotations

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import numpy as np

from ...domain._errors import (
    BackendMismatchError,
    BackendReleasedError,
    DimensionMismatchError,
    RankError,
    ShapeError,
    ShapeMismatchError,
)
from ...domain._shape import Shape, ShapeLike
from ..tensor._tensor import Tensor

logger = logging.getLogger(__name__)


class BackendBase(ABC):
    """
    Abstract base for `IBackend` implementations.

    Subclasses set `name` and implement the storage hooks (`_alloc`,
    `_free`, `_to_host`, `_update`) and the kernel hooks (`_add`, `_mul`,
    `_matmul`, `_tanh`, `_relu`). Hooks receive raw handles and validated
    sizes; they never see `Tensor` objects.
    """

    name: str = "backend"

    def __init__(self) -> None:
        self._live: dict[int, Any] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Context management
    # ------------------------------------------------------------------

    def __enter__(self) -> "BackendBase":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def live_count(self) -> int:
        """Number of payloads currently allocated and not yet released."""
        return len(self._live)

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"live={len(self._live)}"
        return f"{type(self).__name__}({state})"

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise BackendReleasedError(f"Backend '{self.name}'")

    def _handle_of(self, t: Tensor) -> Any:
        """
        Resolve the storage handle of a payload owned by this backend.

        Raises
        ------
        BackendMismatchError
            If `t` was allocated by another backend instance.
        BackendReleasedError
            If the backend is closed or `t` has been released.
        """
        if not isinstance(t, Tensor):
            raise TypeError(f"Expected Tensor, got {type(t).__name__}")
        if t.backend is not self:
            raise BackendMismatchError(
                getattr(t.backend, "name", repr(t.backend)), self.name
            )
        self._check_open()
        if t.id not in self._live:
            raise BackendReleasedError(repr(t))
        return self._live[t.id]

    def _wrap(self, shape: Shape, handle: Any) -> Tensor:
        t = Tensor(shape, self, handle)
        self._live[t.id] = handle
        weakref.finalize(t, BackendBase._finalize, self, t.id)
        return t

    @staticmethod
    def _finalize(backend: "BackendBase", tid: int) -> None:
        if backend._closed:
            return
        handle = backend._live.pop(tid, None)
        if handle is not None:
            backend._free(handle)

    # ------------------------------------------------------------------
    # IBackend surface
    # ------------------------------------------------------------------

    def allocate(
        self, shape: ShapeLike, data: Optional[Sequence[float]] = None
    ) -> Tensor:
        """
        Allocate a payload, zero-filled unless `data` is given.

        Parameters
        ----------
        shape : ShapeLike
            Payload shape.
        data : Optional[Sequence[float]], optional
            Flat row-major initial values.

        Returns
        -------
        Tensor
            The new payload.

        Raises
        ------
        ShapeError
            If ``len(data) != shape.size``.
        """
        self._check_open()
        s = Shape.of(shape)
        host = None
        if data is not None:
            host = np.ascontiguousarray(data, dtype=np.float32).reshape(-1)
            if host.size != s.size:
                raise ShapeError(
                    f"Data length {host.size} doesn't match shape size {s.size}."
                )
        return self._wrap(s, self._alloc(s.size, host))

    def add(self, a: Tensor, b: Tensor) -> Tensor:
        ha, hb = self._handle_of(a), self._handle_of(b)
        if a.shape != b.shape:
            raise ShapeMismatchError("add", a.shape, b.shape)
        return self._wrap(a.shape, self._add(ha, hb, a.size))

    def multiply(self, a: Tensor, b: Tensor) -> Tensor:
        ha, hb = self._handle_of(a), self._handle_of(b)
        if a.shape != b.shape:
            raise ShapeMismatchError("multiply", a.shape, b.shape)
        return self._wrap(a.shape, self._mul(ha, hb, a.size))

    def matmul(self, a: Tensor, b: Tensor) -> Tensor:
        ha, hb = self._handle_of(a), self._handle_of(b)
        if a.rank != 2:
            raise RankError("matmul", a.rank)
        if b.rank != 2:
            raise RankError("matmul", b.rank)
        if a.shape[1] != b.shape[0]:
            raise DimensionMismatchError(a.shape, b.shape)
        M, K = a.shape.dims
        N = b.shape[1]
        return self._wrap(Shape(M, N), self._matmul(ha, hb, M, N, K))

    def tanh(self, x: Tensor) -> Tensor:
        hx = self._handle_of(x)
        return self._wrap(x.shape, self._tanh(hx, x.size))

    def relu(self, x: Tensor) -> Tensor:
        hx = self._handle_of(x)
        return self._wrap(x.shape, self._relu(hx, x.size))

    def materialize(self, x: Tensor) -> np.ndarray:
        """
        Copy a payload into a new flat float32 host array.
        """
        hx = self._handle_of(x)
        return self._to_host(hx, x.size)

    def update_in_place(
        self, x: Tensor, gradient: Sequence[float], learning_rate: float
    ) -> None:
        """
        Apply ``x -= learning_rate * gradient`` elementwise, in place.

        Raises
        ------
        ShapeMismatchError
            If the gradient length differs from the payload element count.
        """
        hx = self._handle_of(x)
        g = np.ascontiguousarray(gradient, dtype=np.float32).reshape(-1)
        if g.size != x.size:
            raise ShapeMismatchError("update_in_place", x.shape, (g.size,))
        self._update(hx, g, float(learning_rate), x.size)

    def release(self, x: Tensor) -> None:
        """
        Free one payload. Releasing twice, or after `close()`, is a no-op.
        """
        if x.backend is not self:
            raise BackendMismatchError(
                getattr(x.backend, "name", repr(x.backend)), self.name
            )
        if self._closed:
            return
        handle = self._live.pop(x.id, None)
        if handle is not None:
            self._free(handle)

    def close(self) -> None:
        """
        Free every outstanding payload and retire the backend.
        """
        if self._closed:
            return
        n = len(self._live)
        while self._live:
            _, handle = self._live.popitem()
            self._free(handle)
        self._closed = True
        self._shutdown()
        logger.debug("%s closed, freed %d outstanding payload(s)", self.name, n)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _alloc(self, numel: int, host: Optional[np.ndarray]) -> Any: ...

    @abstractmethod
    def _free(self, handle: Any) -> None: ...

    @abstractmethod
    def _to_host(self, handle: Any, numel: int) -> np.ndarray: ...

    @abstractmethod
    def _update(self, handle: Any, grad: np.ndarray, lr: float, numel: int) -> None: ...

    @abstractmethod
    def _add(self, ha: Any, hb: Any, numel: int) -> Any: ...

    @abstractmethod
    def _mul(self, ha: Any, hb: Any, numel: int) -> Any: ...

    @abstractmethod
    def _matmul(self, ha: Any, hb: Any, M: int, N: int, K: int) -> Any: ...

    @abstractmethod
    def _tanh(self, hx: Any, numel: int) -> Any: ...

    @abstractmethod
    def _relu(self, hx: Any, numel: int) -> Any: ...

    def _shutdown(self) -> None:
        """Release substrate resources after all payloads are freed."""
