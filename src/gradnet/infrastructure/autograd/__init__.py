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
from ._engine import backward, iter_reachable, topological_order, zero_grad
from ._node import GraphNode
from ._value import Value
from ._tensor_value import TensorValue

__all__ = [
    "OpKind",
    "AddRule",
    "MulRule",
    "PowRule",
    "ExpRule",
    "TanhRule",
    "ReluRule",
    "MatmulRule",
    "backward",
    "iter_reachable",
    "topological_order",
    "zero_grad",
    "GraphNode",
    "Value",
    "TensorValue",
]
