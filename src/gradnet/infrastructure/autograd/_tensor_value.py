"""
Tensor autograd node.

`TensorValue` is the tensor counterpart of `Value`: it wraps a backend-bound
`Tensor` payload, keeps a gradient payload of the same shape on the same
backend, and records a backward rule per operator. The graph engine is
shared with the scalar node, so traversal, seeding and accumulation behave
identically.

Design notes
------------
- Forward primitives (`+`, `*`, `@`, `tanh`, `relu`) run on the payload's
  backend. `exp` and `**` go through the payload's host-assisted helpers.
- A plain number mixed into an expression becomes a constant leaf of the
  other operand's shape, allocated on the same backend.
- Nodes from two different backends cannot be combined
  (`BackendMismatchError`).
- Shape checks happen when the operator is called, never during backward.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

import numpy as np

from ...domain._backend import IBackend
from ...domain._shape import ShapeLike
from ..tensor._tensor import Tensor
from ._backward_rules import (
    AddRule,
    ExpRule,
    MatmulRule,
    MulRule,
    OpKind,
    PowRule,
    ReluRule,
    TanhRule,
)
from ._node import GraphNode

Number = Union[int, float]


class TensorValue(GraphNode):
    """
    Tensor node with a `Tensor` payload and a `Tensor` gradient.

    Parameters
    ----------
    data : Tensor
        Forward payload.
    children : Iterable[TensorValue], optional
        Operands of the producing operator.
    rule : optional
        Backward rule of the producing operator.
    op : str, optional
        Diagnostic operator label.
    label : str, optional
        Diagnostic user label.

    Notes
    -----
    The gradient starts as a zero payload allocated on ``data.backend``.
    """

    def __init__(
        self,
        data: Tensor,
        children: Iterable["TensorValue"] = (),
        rule: Optional[object] = None,
        op: str = "",
        label: str = "",
    ) -> None:
        if not isinstance(data, Tensor):
            raise TypeError(f"TensorValue expects a Tensor, got {type(data).__name__}")
        super().__init__(data, children, rule, op, label)

    @classmethod
    def from_data(
        cls,
        backend: IBackend,
        shape: ShapeLike,
        data: Optional[Sequence[float]] = None,
        *,
        label: str = "",
    ) -> "TensorValue":
        """
        Allocate a leaf on `backend` from flat (or nested) values.

        Raises
        ------
        ShapeError
            If the data length does not match the shape.
        """
        return cls(Tensor.from_data(backend, shape, data), label=label)

    @property
    def backend(self) -> IBackend:
        return self.data.backend

    @property
    def shape(self):
        return self.data.shape

    def _coerce(self, other: Union["TensorValue", Number]) -> "TensorValue":
        if isinstance(other, TensorValue):
            return other
        if isinstance(other, (int, float, np.floating, np.integer)) and not isinstance(
            other, bool
        ):
            return TensorValue(Tensor.full(self.backend, self.shape, float(other)))
        raise TypeError(f"Cannot convert {type(other).__name__} to TensorValue")

    # ------------------------------------------------------------------
    # Payload hooks
    # ------------------------------------------------------------------

    def _zero(self) -> Tensor:
        return self.data.zeros_like()

    def _unit(self) -> Tensor:
        return self.data.ones_like()

    def _accumulate(self, delta: Tensor) -> None:
        self.grad = self.grad + delta

    @staticmethod
    def _payload_pow(x: Tensor, p: float) -> Tensor:
        return x.power(p)

    @staticmethod
    def _payload_positive(x: Tensor) -> Tensor:
        return x.positive_mask()

    # ------------------------------------------------------------------
    # Primitive operators
    # ------------------------------------------------------------------

    def __add__(self, other: Union["TensorValue", Number]) -> "TensorValue":
        o = self._coerce(other)
        return TensorValue(
            self.data + o.data, (self, o), AddRule(self, o), OpKind.ADD.value
        )

    def __mul__(self, other: Union["TensorValue", Number]) -> "TensorValue":
        o = self._coerce(other)
        return TensorValue(
            self.data * o.data, (self, o), MulRule(self, o), OpKind.MUL.value
        )

    def matmul(self, other: "TensorValue") -> "TensorValue":
        """
        Rank-2 matrix product.

        Raises
        ------
        RankError
            If either operand is not rank-2.
        DimensionMismatchError
            If the inner dimensions differ.
        """
        if not isinstance(other, TensorValue):
            raise TypeError(f"matmul expects a TensorValue, got {type(other).__name__}")
        return TensorValue(
            self.data.matmul(other.data),
            (self, other),
            MatmulRule(self, other),
            OpKind.MATMUL.value,
        )

    def __matmul__(self, other: "TensorValue") -> "TensorValue":
        return self.matmul(other)

    def __pow__(self, exponent: Number) -> "TensorValue":
        if not isinstance(exponent, (int, float)):
            return NotImplemented
        p = float(exponent)
        return TensorValue(self.data.power(p), (self,), PowRule(self, p), f"**{p:g}")

    def exp(self) -> "TensorValue":
        return TensorValue(self.data.exp(), (self,), ExpRule(self), OpKind.EXP.value)

    def tanh(self) -> "TensorValue":
        return TensorValue(
            self.data.tanh(), (self,), TanhRule(self), OpKind.TANH.value
        )

    def relu(self) -> "TensorValue":
        return TensorValue(
            self.data.relu(), (self,), ReluRule(self), OpKind.RELU.value
        )

    # ------------------------------------------------------------------
    # Derived operators
    # ------------------------------------------------------------------

    def __radd__(self, other: Number) -> "TensorValue":
        return self._coerce(other) + self

    def __rmul__(self, other: Number) -> "TensorValue":
        return self._coerce(other) * self

    def __neg__(self) -> "TensorValue":
        return self * -1.0

    def __sub__(self, other: Union["TensorValue", Number]) -> "TensorValue":
        return self + (-self._coerce(other))

    def __rsub__(self, other: Number) -> "TensorValue":
        return self._coerce(other) + (-self)

    def __truediv__(self, other: Union["TensorValue", Number]) -> "TensorValue":
        return self * self._coerce(other) ** -1.0

    def __rtruediv__(self, other: Number) -> "TensorValue":
        return self._coerce(other) * self**-1.0

    def sigmoid(self) -> "TensorValue":
        """``1 / (1 + exp(-x))`` built from primitive operators."""
        return 1.0 / (1.0 + (-self).exp())

    # ------------------------------------------------------------------
    # Host access and lifetime
    # ------------------------------------------------------------------

    def to_numpy(self) -> np.ndarray:
        return self.data.to_numpy()

    def grad_numpy(self) -> np.ndarray:
        return self.grad.to_numpy()

    def release(self) -> None:
        """Free this node's payload and gradient storage."""
        self.data.release()
        self.grad.release()

    def __repr__(self) -> str:
        label = f"{self.label}:" if self.label else ""
        return f"TensorValue({label}{self.data!r})"
