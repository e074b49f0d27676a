"""
Backend-bound payload type.

This module provides `Tensor`, the raw numeric content an autograd node
wraps: a fixed `Shape`, the backend instance that allocated it, and an
opaque backend handle (a NumPy array on the host backend, a device pointer
on the CUDA backend).

Design notes
------------
- A `Tensor` never touches its storage directly. Every primitive goes
  through ``self.backend`` so the same code runs on every substrate.
- Mixing a Tensor with a Python number allocates a constant payload of the
  matching shape on the same backend. There is no scalar fast path.
- `transpose`, `positive_mask`, `exp` and `power` are not part of the
  backend capability set. They materialize to host memory, compute with
  NumPy, and allocate the result on the same backend.
- Broadcasting is not implemented; binary ops require exact shape matches.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._backend import IBackend
from ...domain._errors import RankError, ShapeError
from ...domain._shape import Shape, ShapeLike

Number = Union[int, float]

_ids = itertools.count(1)


class Tensor:
    """
    Fixed-shape float32 payload bound to one backend.

    Instances are created by backends (`IBackend.allocate` and the
    primitive ops) or through the factories below; user code does not call
    the constructor directly.

    Parameters
    ----------
    shape : Shape
        Payload shape.
    backend : IBackend
        Backend that owns the storage.
    handle : Any
        Backend-specific storage handle.

    Notes
    -----
    - `id` is a process-wide increasing integer used by backends to track
      live allocations.
    - Arithmetic with a payload of another backend raises
      `BackendMismatchError` (checked by the backend).
    """

    def __init__(self, shape: Shape, backend: IBackend, handle: Any) -> None:
        self._shape = shape
        self._backend = backend
        self._handle = handle
        self._id = next(_ids)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def backend(self) -> IBackend:
        return self._backend

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def id(self) -> int:
        return self._id

    @property
    def size(self) -> int:
        return self._shape.size

    @property
    def rank(self) -> int:
        return self._shape.rank

    def __repr__(self) -> str:
        return f"Tensor{self._shape}[{self._id}]"

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @staticmethod
    def from_data(
        backend: IBackend, shape: ShapeLike, data: Optional[Sequence[float]] = None
    ) -> "Tensor":
        """
        Allocate a payload on `backend`, optionally initialized from `data`.

        Parameters
        ----------
        backend : IBackend
            Target backend.
        shape : ShapeLike
            Payload shape.
        data : Optional[Sequence[float]], optional
            Flat row-major initial values, or a nested sequence / ndarray
            that flattens to ``shape.size`` values.

        Raises
        ------
        ShapeError
            If the data length does not match the shape.
        """
        if data is not None:
            data = np.asarray(data, dtype=np.float32).reshape(-1)
        return backend.allocate(Shape.of(shape), data)

    @staticmethod
    def full(backend: IBackend, shape: ShapeLike, value: float) -> "Tensor":
        s = Shape.of(shape)
        return backend.allocate(s, np.full(s.size, value, dtype=np.float32))

    @staticmethod
    def zeros(backend: IBackend, shape: ShapeLike) -> "Tensor":
        return backend.allocate(Shape.of(shape))

    @staticmethod
    def ones(backend: IBackend, shape: ShapeLike) -> "Tensor":
        return Tensor.full(backend, shape, 1.0)

    def zeros_like(self) -> "Tensor":
        return self._backend.allocate(self._shape)

    def ones_like(self) -> "Tensor":
        return Tensor.full(self._backend, self._shape, 1.0)

    # ------------------------------------------------------------------
    # Host transfer
    # ------------------------------------------------------------------

    def to_host(self) -> np.ndarray:
        """
        Copy the payload into a flat float32 host array.

        Returns
        -------
        np.ndarray
            An independent copy; repeated calls return equal, distinct arrays.
        """
        return self._backend.materialize(self)

    def to_numpy(self) -> np.ndarray:
        """
        Copy the payload into a host array shaped like the payload.
        """
        return self.to_host().reshape(self._shape.dims)

    def item(self) -> float:
        """
        Return the single value held by a size-1 payload.

        Raises
        ------
        ShapeError
            If the payload has more than one element.
        """
        if self._shape.size != 1:
            raise ShapeError(
                f"item() requires a single-element tensor, got shape {self._shape}."
            )
        return float(self.to_host()[0])

    def release(self) -> None:
        """Free the payload storage. Later use raises `BackendReleasedError`."""
        self._backend.release(self)

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    def _as_payload(self, other: Union["Tensor", Number]) -> "Tensor":
        if isinstance(other, Tensor):
            return other
        if isinstance(other, (int, float, np.floating, np.integer)) and not isinstance(
            other, (bool, np.bool_)
        ):
            return Tensor.full(self._backend, self._shape, float(other))
        raise TypeError(f"Unsupported operand type: {type(other).__name__}")

    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._backend.add(self, self._as_payload(other))

    def __radd__(self, other: Number) -> "Tensor":
        return self._backend.add(self._as_payload(other), self)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self._backend.multiply(self, self._as_payload(other))

    def __rmul__(self, other: Number) -> "Tensor":
        return self._backend.multiply(self._as_payload(other), self)

    def __neg__(self) -> "Tensor":
        return self * -1.0

    def __sub__(self, other: Union["Tensor", Number]) -> "Tensor":
        return self + (-self._as_payload(other))

    def __rsub__(self, other: Number) -> "Tensor":
        return self._as_payload(other) + (-self)

    def matmul(self, other: "Tensor") -> "Tensor":
        return self._backend.matmul(self, other)

    def __matmul__(self, other: "Tensor") -> "Tensor":
        return self.matmul(other)

    def tanh(self) -> "Tensor":
        return self._backend.tanh(self)

    def relu(self) -> "Tensor":
        return self._backend.relu(self)

    # ------------------------------------------------------------------
    # Host-assisted helpers
    # ------------------------------------------------------------------

    def _from_host(self, shape: Shape, values: np.ndarray) -> "Tensor":
        return self._backend.allocate(
            shape, np.ascontiguousarray(values, dtype=np.float32).reshape(-1)
        )

    def transpose(self) -> "Tensor":
        """
        Return the transpose of a rank-2 payload.

        Raises
        ------
        RankError
            If the payload is not rank-2.
        """
        if self._shape.rank != 2:
            raise RankError("transpose", self._shape.rank)
        m, n = self._shape.dims
        return self._from_host(Shape(n, m), self.to_numpy().T)

    @property
    def T(self) -> "Tensor":
        return self.transpose()

    def positive_mask(self) -> "Tensor":
        """Return 1.0 where the value is strictly positive, else 0.0."""
        return self._from_host(self._shape, (self.to_host() > 0).astype(np.float32))

    def exp(self) -> "Tensor":
        return self._from_host(self._shape, np.exp(self.to_host()))

    def power(self, exponent: float) -> "Tensor":
        return self._from_host(
            self._shape, np.power(self.to_host(), np.float32(exponent))
        )

    def __pow__(self, exponent: Number) -> "Tensor":
        if not isinstance(exponent, (int, float)):
            return NotImplemented
        return self.power(float(exponent))
