"""
Backward rules for the fixed operator set.

Each differentiable operator records a rule on the node it produces. A rule
is a small frozen dataclass tagged with an `OpKind` and carrying only the
operands (and constants) needed to recompute its contribution. Rules are
inspectable data.

Every rule implements ``apply(out)``: read ``out.grad`` (the upstream
gradient) and add the operator's contribution into each operand's `grad`
through ``operand._accumulate(delta)``.

The arithmetic is written once for both payload kinds. Scalars are Python
floats; tensor payloads are `Tensor` objects whose operators dispatch to
their backend. The two helpers that differ per payload kind (`power` and
`positive_mask`) are provided by the node class of `out`.

Contribution table (``g`` is the upstream gradient)
---------------------------------------------------
- ADD    a + b    : a += g; b += g
- MUL    a * b    : a += b * g; b += a * g
- POW    a ** p   : a += p * a ** (p - 1) * g
- EXP    exp(a)   : a += out * g
- TANH   tanh(a)  : a += (1 - out ** 2) * g
- RELU   relu(a)  : a += (out > 0) * g
- MATMUL A @ B    : A += g @ B.T; B += A.T @ g
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Tuple


class OpKind(str, Enum):
    """
    Tags for the fixed operator set. The value doubles as the node's `op`
    diagnostic label.
    """

    LEAF = ""
    ADD = "+"
    MUL = "*"
    POW = "**"
    EXP = "exp"
    TANH = "tanh"
    RELU = "relu"
    MATMUL = "matmul"


@dataclass(frozen=True, eq=False)
class AddRule:
    a: Any
    b: Any

    kind: ClassVar[OpKind] = OpKind.ADD

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a, self.b)

    def apply(self, out: Any) -> None:
        g = out.grad
        self.a._accumulate(g)
        self.b._accumulate(g)


@dataclass(frozen=True, eq=False)
class MulRule:
    a: Any
    b: Any

    kind: ClassVar[OpKind] = OpKind.MUL

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a, self.b)

    def apply(self, out: Any) -> None:
        g = out.grad
        self.a._accumulate(self.b.data * g)
        self.b._accumulate(self.a.data * g)


@dataclass(frozen=True, eq=False)
class PowRule:
    """
    Rule for ``a ** exponent`` with a constant exponent.
    """

    a: Any
    exponent: float

    kind: ClassVar[OpKind] = OpKind.POW

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a,)

    def apply(self, out: Any) -> None:
        p = self.exponent
        local = p * out._payload_pow(self.a.data, p - 1.0)
        self.a._accumulate(local * out.grad)


@dataclass(frozen=True, eq=False)
class ExpRule:
    a: Any

    kind: ClassVar[OpKind] = OpKind.EXP

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a,)

    def apply(self, out: Any) -> None:
        self.a._accumulate(out.data * out.grad)


@dataclass(frozen=True, eq=False)
class TanhRule:
    a: Any

    kind: ClassVar[OpKind] = OpKind.TANH

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a,)

    def apply(self, out: Any) -> None:
        t = out.data
        self.a._accumulate((1.0 - t * t) * out.grad)


@dataclass(frozen=True, eq=False)
class ReluRule:
    """
    Rule for ``max(0, a)``.

    The local derivative is 1 only where the *output* is strictly positive,
    so an input of exactly zero receives no gradient.
    """

    a: Any

    kind: ClassVar[OpKind] = OpKind.RELU

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a,)

    def apply(self, out: Any) -> None:
        self.a._accumulate(out._payload_positive(out.data) * out.grad)


@dataclass(frozen=True, eq=False)
class MatmulRule:
    """
    Rule for the rank-2 matrix product ``a @ b`` (tensor payloads only).
    """

    a: Any
    b: Any

    kind: ClassVar[OpKind] = OpKind.MATMUL

    @property
    def inputs(self) -> Tuple[Any, ...]:
        return (self.a, self.b)

    def apply(self, out: Any) -> None:
        g = out.grad
        self.a._accumulate(g.matmul(self.b.data.transpose()))
        self.b._accumulate(self.a.data.transpose().matmul(g))


__all__ = [
    "OpKind",
    "AddRule",
    "MulRule",
    "PowRule",
    "ExpRule",
    "TanhRule",
    "ReluRule",
    "MatmulRule",
]
