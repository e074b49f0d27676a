"""
Scalar multi-layer perceptron built from `Value` nodes.

This module provides the classic neuron / layer / MLP stack over scalar
autograd nodes. Every weight and bias is its own `Value` leaf, so the
forward pass builds one graph node per multiply-add and `backward()` on a
loss reaches every parameter.

Design notes
------------
- Weights and biases are drawn uniformly from [-1, 1] using a
  `numpy.random.Generator`. Passing a seeded generator makes construction
  reproducible.
- Hidden layers apply `tanh`; the last layer of an `MLP` is linear.
- Input arity is checked on every forward call.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np

from ..domain._errors import ArityMismatchError, InvalidOutputCardinalityError
from .autograd._value import Value


def _uniform(rng: Optional[np.random.Generator], n: int) -> List[float]:
    gen = rng if rng is not None else np.random.default_rng()
    return [float(v) for v in gen.uniform(-1.0, 1.0, size=n)]


class Neuron:
    """
    Single neuron computing ``act(b + sum_i w_i * x_i)``.

    Parameters
    ----------
    nin : int
        Number of inputs.
    nonlin : bool, optional
        Apply `tanh` when True (default); linear otherwise.
    rng : Optional[numpy.random.Generator], optional
        Source of initial weights.
    """

    def __init__(
        self, nin: int, nonlin: bool = True, rng: Optional[np.random.Generator] = None
    ) -> None:
        if nin <= 0:
            raise ValueError(f"nin must be > 0, got {nin}")
        init = _uniform(rng, nin + 1)
        self.weights: List[Value] = [Value(w) for w in init[:nin]]
        self.bias = Value(init[nin])
        self.nonlin = bool(nonlin)

    @property
    def nin(self) -> int:
        return len(self.weights)

    def forward(self, x: Sequence[Union[Value, float]]) -> Value:
        """
        Raises
        ------
        ArityMismatchError
            If ``len(x) != nin``.
        """
        if len(x) != len(self.weights):
            raise ArityMismatchError(len(self.weights), len(x))
        act = self.bias
        for w, xi in zip(self.weights, x):
            act = act + w * xi
        return act.tanh() if self.nonlin else act

    __call__ = forward

    def parameters(self) -> List[Value]:
        return [*self.weights, self.bias]

    def zero_grad(self) -> None:
        for p in self.parameters():
            p.reset_grad()

    def __repr__(self) -> str:
        return f"{'Tanh' if self.nonlin else 'Linear'}Neuron({len(self.weights)})"


class Layer:
    """
    `nout` independent neurons sharing the same inputs.
    """

    def __init__(
        self,
        nin: int,
        nout: int,
        nonlin: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if nout <= 0:
            raise ValueError(f"nout must be > 0, got {nout}")
        self.neurons = [Neuron(nin, nonlin, rng) for _ in range(nout)]

    def forward(self, x: Sequence[Union[Value, float]]) -> List[Value]:
        return [n.forward(x) for n in self.neurons]

    __call__ = forward

    def parameters(self) -> List[Value]:
        return [p for n in self.neurons for p in n.parameters()]

    def zero_grad(self) -> None:
        for n in self.neurons:
            n.zero_grad()

    def __repr__(self) -> str:
        return f"Layer of [{', '.join(repr(n) for n in self.neurons)}]"


class MLP:
    """
    Multi-layer perceptron over scalar nodes.

    Parameters
    ----------
    nin : int
        Number of network inputs.
    nouts : Sequence[int]
        Output width of each layer, in order. All layers but the last use
        `tanh`; the last is linear.
    rng : Optional[numpy.random.Generator], optional
        Source of initial weights, shared by all layers.

    Examples
    --------
    >>> net = MLP(3, [4, 4, 1], rng=np.random.default_rng(0))
    >>> y = net.forward_single([2.0, 3.0, -1.0])
    """

    def __init__(
        self,
        nin: int,
        nouts: Sequence[int],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        sizes = [nin, *nouts]
        if len(sizes) < 2:
            raise ValueError("MLP requires at least one layer")
        gen = rng if rng is not None else np.random.default_rng()
        last = len(sizes) - 2
        self.layers = [
            Layer(sizes[i], sizes[i + 1], nonlin=i != last, rng=gen)
            for i in range(len(sizes) - 1)
        ]

    @property
    def nin(self) -> int:
        return self.layers[0].neurons[0].nin

    def forward(self, x: Sequence[Union[Value, float]]) -> List[Value]:
        """
        Raises
        ------
        ArityMismatchError
            If ``len(x) != nin``.
        """
        out: Sequence[Union[Value, float]] = x
        for layer in self.layers:
            out = layer.forward(out)
        return list(out)

    __call__ = forward

    def forward_single(self, x: Sequence[Union[Value, float]]) -> Value:
        """
        Forward pass for networks with exactly one output.

        Raises
        ------
        InvalidOutputCardinalityError
            If the network does not produce exactly one output.
        """
        out = self.forward(x)
        if len(out) != 1:
            raise InvalidOutputCardinalityError(len(out))
        return out[0]

    def parameters(self) -> List[Value]:
        return [p for layer in self.layers for p in layer.parameters()]

    def zero_grad(self) -> None:
        for layer in self.layers:
            layer.zero_grad()

    def __repr__(self) -> str:
        body = "\n  ".join(f"Layer {i}: {l!r}" for i, l in enumerate(self.layers))
        return f"MLP[\n  {body}\n]"
