"""
Optimizer primitives for gradnet.

This module provides plain stochastic gradient descent over autograd leaf
nodes, updating their payloads in place from their accumulated gradients.

Design notes
------------
- Scalar `Value` parameters are updated directly: ``p.data -= lr * p.grad``.
- `TensorValue` parameters are updated on their own backend through
  `IBackend.update_in_place`, so the payload handle (and any device
  storage behind it) stays the same object across steps.
- Optimizers never run backward themselves; callers compute gradients
  first and call `zero_grad()` between iterations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union

from .autograd._tensor_value import TensorValue
from .autograd._value import Value

Param = Union[Value, TensorValue]


@dataclass
class SGD:
    """
    Stochastic Gradient Descent (SGD) optimizer.

    Update rule
    -----------
    For each parameter ``p`` with gradient ``g``: ``p <- p - lr * g``.

    Parameters
    ----------
    params : Iterable[Value | TensorValue]
        Parameters to be optimized. The iterable is consumed and stored.
    lr : float, optional
        Learning rate. Must be positive. Defaults to 0.01.

    Raises
    ------
    ValueError
        If ``lr <= 0``.
    """

    params: List[Param]
    lr: float = 0.01

    def __init__(self, params: Iterable[Param], *, lr: float = 0.01) -> None:
        self.params = list(params)
        self.lr = float(lr)
        if self.lr <= 0.0:
            raise ValueError(f"lr must be > 0, got {self.lr}")

    def zero_grad(self) -> None:
        """Reset the gradient of every managed parameter to zero."""
        for p in self.params:
            p.reset_grad()

    def step(self) -> None:
        """Apply one SGD update to every managed parameter."""
        for p in self.params:
            if isinstance(p, TensorValue):
                p.backend.update_in_place(p.data, p.grad.to_host(), self.lr)
            else:
                p.data -= self.lr * p.grad
