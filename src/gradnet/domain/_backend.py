"""
Compute-backend contracts for gradnet.

This module defines the structural interfaces that let the same autograd
graph machinery run its elementwise and matrix primitives on different
execution substrates:

- `IPayload`: the raw numeric content a node wraps (a shape, the backend
  that owns it, and an opaque backend handle).
- `IBackend`: the capability set {allocate, add, multiply, matmul, tanh,
  relu, materialize, update_in_place} plus explicit release. Implemented
  once per substrate (host NumPy loops, CUDA dispatch).
- `IPrimitiveExecutor`: the black-box primitive executor an accelerated
  backend dispatches to. Device buffers are opaque integer handles.

Design notes
------------
- Uses `typing.Protocol` with `@runtime_checkable` so infrastructure code
  and tests can validate conformance without class-identity coupling.
- Two conforming backends must be numerically interchangeable within
  floating-point tolerance for identical inputs; the graph engine is
  otherwise substrate-agnostic.
- Every call is synchronous: an implementation that launches parallel
  work internally returns only once results are ready.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from ._shape import Shape, ShapeLike


@runtime_checkable
class IPayload(Protocol):
    """
    Duck-typed payload contract.

    A payload is bound to exactly one backend instance for its whole
    lifetime. Its `handle` is meaningful only to that backend.
    """

    @property
    def shape(self) -> Shape: ...

    @property
    def backend(self) -> "IBackend": ...

    @property
    def handle(self) -> Any: ...


@runtime_checkable
class IBackend(Protocol):
    """
    Backend capability contract.

    Required members
    ----------------
    - `allocate(shape, data=None)` creates a payload, zero-filled when no
      data is given. Raises `ShapeError` when ``len(data) != shape.size``.
    - `add(a, b)` / `multiply(a, b)` are elementwise. Raise
      `ShapeMismatchError` when shapes differ.
    - `matmul(a, b)` is a dense rank-2 matrix product. Raises `RankError`
      or `DimensionMismatchError`.
    - `tanh(x)` / `relu(x)` are elementwise.
    - `materialize(x)` returns an independent flat host copy.
    - `update_in_place(x, gradient, learning_rate)` performs
      ``x -= learning_rate * gradient``.
    - `release(x)` frees one payload; `close()` frees everything and
      retires the backend.
    """

    name: str

    def allocate(
        self, shape: ShapeLike, data: Optional[Sequence[float]] = None
    ) -> IPayload: ...

    def add(self, a: IPayload, b: IPayload) -> IPayload: ...

    def multiply(self, a: IPayload, b: IPayload) -> IPayload: ...

    def matmul(self, a: IPayload, b: IPayload) -> IPayload: ...

    def tanh(self, x: IPayload) -> IPayload: ...

    def relu(self, x: IPayload) -> IPayload: ...

    def materialize(self, x: IPayload) -> Any: ...

    def update_in_place(
        self, x: IPayload, gradient: Sequence[float], learning_rate: float
    ) -> None: ...

    def release(self, x: IPayload) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class IPrimitiveExecutor(Protocol):
    """
    Black-box primitive executor used by accelerated backends.

    All buffers are float32 and addressed by opaque integer handles
    (device pointers). Element counts are passed explicitly. Kernels may
    run asynchronously; callers must invoke `synchronize()` before relying
    on results.
    """

    def malloc(self, nbytes: int) -> int: ...

    def free(self, dev_ptr: int) -> None: ...

    def memcpy_htod(self, dst_dev: int, src_host: Any) -> None: ...

    def memcpy_dtoh(self, dst_host: Any, src_dev: int) -> None: ...

    def memset_zero(self, dev_ptr: int, nbytes: int) -> None: ...

    def add(self, a_dev: int, b_dev: int, y_dev: int, numel: int) -> None: ...

    def mul(self, a_dev: int, b_dev: int, y_dev: int, numel: int) -> None: ...

    def tanh(self, x_dev: int, y_dev: int, numel: int) -> None: ...

    def relu(self, x_dev: int, y_dev: int, numel: int) -> None: ...

    def matmul(
        self, a_dev: int, b_dev: int, c_dev: int, M: int, N: int, K: int
    ) -> None: ...

    def sgd_update(
        self, x_dev: int, g_dev: int, lr: float, numel: int
    ) -> None: ...

    def synchronize(self) -> None: ...
