"""
Scalar autograd node.

`Value` wraps a Python float and records, for every arithmetic operator, the
children it was derived from and the backward rule of the operator. Calling
`backward()` on a terminal `Value` fills `grad` on every node it depends on.

Plain numbers mixed into an expression are turned into ordinary leaf nodes
through `Value.coerce`; there is no constant fast path.

Example
-------
>>> x, y = Value(2.0, label="x"), Value(3.0, label="y")
>>> z = x * y + x * x
>>> z.backward()
>>> (z.data, x.grad, y.grad)
(10.0, 7.0, 2.0)
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Union

import numpy as np

from ._backward_rules import (
    AddRule,
    ExpRule,
    MulRule,
    OpKind,
    PowRule,
    ReluRule,
    TanhRule,
)
from ._node import GraphNode

Number = Union[int, float]


def _ieee_exp(x: float) -> float:
    # overflow saturates to inf instead of raising OverflowError
    with np.errstate(over="ignore"):
        return float(np.exp(np.float64(x)))


def _ieee_pow(x: float, p: float) -> float:
    # 0 ** -1 is inf and a negative base with a fractional exponent is nan
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.power(np.float64(x), np.float64(p)))


class Value(GraphNode):
    """
    Scalar node with a float payload and a float gradient.

    Parameters
    ----------
    data : float
        Forward value.
    children : Iterable[Value], optional
        Operands of the producing operator.
    rule : optional
        Backward rule of the producing operator.
    op : str, optional
        Diagnostic operator label.
    label : str, optional
        Diagnostic user label.
    """

    def __init__(
        self,
        data: Number,
        children: Iterable["Value"] = (),
        rule: Optional[object] = None,
        op: str = "",
        label: str = "",
    ) -> None:
        super().__init__(float(data), children, rule, op, label)

    @staticmethod
    def coerce(x: Union["Value", Number]) -> "Value":
        """
        Return `x` if it is a `Value`, otherwise a new leaf holding `x`.

        Raises
        ------
        TypeError
            If `x` is neither a `Value` nor a real number.
        """
        if isinstance(x, Value):
            return x
        if isinstance(x, (int, float)) and not isinstance(x, bool):
            return Value(x)
        raise TypeError(f"Cannot convert {type(x).__name__} to Value")

    # ------------------------------------------------------------------
    # Payload hooks
    # ------------------------------------------------------------------

    def _zero(self) -> float:
        return 0.0

    def _unit(self) -> float:
        return 1.0

    def _accumulate(self, delta: float) -> None:
        self.grad += delta

    @staticmethod
    def _payload_pow(x: float, p: float) -> float:
        return _ieee_pow(x, p)

    @staticmethod
    def _payload_positive(x: float) -> float:
        return 1.0 if x > 0 else 0.0

    # ------------------------------------------------------------------
    # Primitive operators
    # ------------------------------------------------------------------

    def __add__(self, other: Union["Value", Number]) -> "Value":
        o = Value.coerce(other)
        return Value(self.data + o.data, (self, o), AddRule(self, o), OpKind.ADD.value)

    def __mul__(self, other: Union["Value", Number]) -> "Value":
        o = Value.coerce(other)
        return Value(self.data * o.data, (self, o), MulRule(self, o), OpKind.MUL.value)

    def __pow__(self, exponent: Number) -> "Value":
        if not isinstance(exponent, (int, float)):
            return NotImplemented
        p = float(exponent)
        return Value(_ieee_pow(self.data, p), (self,), PowRule(self, p), f"**{p:g}")

    def exp(self) -> "Value":
        return Value(_ieee_exp(self.data), (self,), ExpRule(self), OpKind.EXP.value)

    def tanh(self) -> "Value":
        return Value(math.tanh(self.data), (self,), TanhRule(self), OpKind.TANH.value)

    def relu(self) -> "Value":
        out = 0.0 if self.data < 0 else self.data
        return Value(out, (self,), ReluRule(self), OpKind.RELU.value)

    # ------------------------------------------------------------------
    # Derived operators
    # ------------------------------------------------------------------

    def __radd__(self, other: Number) -> "Value":
        return Value.coerce(other) + self

    def __rmul__(self, other: Number) -> "Value":
        return Value.coerce(other) * self

    def __neg__(self) -> "Value":
        return self * -1.0

    def __sub__(self, other: Union["Value", Number]) -> "Value":
        return self + (-Value.coerce(other))

    def __rsub__(self, other: Number) -> "Value":
        return Value.coerce(other) + (-self)

    def __truediv__(self, other: Union["Value", Number]) -> "Value":
        return self * Value.coerce(other) ** -1.0

    def __rtruediv__(self, other: Number) -> "Value":
        return Value.coerce(other) * self**-1.0

    def sigmoid(self) -> "Value":
        """``1 / (1 + exp(-x))`` built from primitive operators."""
        return 1.0 / (1.0 + (-self).exp())

    def __float__(self) -> float:
        return self.data

    def __repr__(self) -> str:
        label = f"{self.label}:" if self.label else ""
        return f"Value({label}data={self.data:.4f}, grad={self.grad:.4f})"
