"""
Multi-layer perceptron built from `TensorValue` nodes.

The structure mirrors `gradnet.infrastructure._networks` exactly, but each
weight and bias is a single-element `TensorValue` allocated on a backend,
so the forward and backward passes run through that backend's primitives.
Inputs are expected to be single-element tensor nodes (or plain numbers,
which become constants of the matching shape).

Lifetime
--------
Parameters own backend storage. `TensorMLP.close()` releases every
parameter payload; the backend itself stays open because it may be shared.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np

from ..domain._backend import IBackend
from ..domain._errors import ArityMismatchError, InvalidOutputCardinalityError
from .autograd._tensor_value import TensorValue
from .backends._selection import default_backend

TensorInput = Union[TensorValue, float]


def _param(backend: IBackend, value: float) -> TensorValue:
    return TensorValue.from_data(backend, (1,), [value])


class TensorNeuron:
    """
    Single neuron over single-element tensor nodes.

    Parameters
    ----------
    nin : int
        Number of inputs.
    nonlin : bool, optional
        Apply `tanh` when True (default); linear otherwise.
    backend : Optional[IBackend], optional
        Backend holding the parameters. Defaults to `default_backend()`.
    rng : Optional[numpy.random.Generator], optional
        Source of initial weights, uniform in [-1, 1].
    """

    def __init__(
        self,
        nin: int,
        nonlin: bool = True,
        backend: Optional[IBackend] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if nin <= 0:
            raise ValueError(f"nin must be > 0, got {nin}")
        self.backend = backend if backend is not None else default_backend()
        gen = rng if rng is not None else np.random.default_rng()
        init = gen.uniform(-1.0, 1.0, size=nin + 1)
        self.weights: List[TensorValue] = [
            _param(self.backend, float(w)) for w in init[:nin]
        ]
        self.bias = _param(self.backend, float(init[nin]))
        self.nonlin = bool(nonlin)

    @property
    def nin(self) -> int:
        return len(self.weights)

    def forward(self, x: Sequence[TensorInput]) -> TensorValue:
        if len(x) != len(self.weights):
            raise ArityMismatchError(len(self.weights), len(x))
        act = self.bias
        for w, xi in zip(self.weights, x):
            act = act + w * xi
        return act.tanh() if self.nonlin else act

    __call__ = forward

    def parameters(self) -> List[TensorValue]:
        return [*self.weights, self.bias]

    def zero_grad(self) -> None:
        for p in self.parameters():
            p.reset_grad()

    def release(self) -> None:
        for p in self.parameters():
            p.release()

    def __repr__(self) -> str:
        kind = "Tanh" if self.nonlin else "Linear"
        return f"{kind}TensorNeuron({len(self.weights)})"


class TensorLayer:
    def __init__(
        self,
        nin: int,
        nout: int,
        nonlin: bool = True,
        backend: Optional[IBackend] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if nout <= 0:
            raise ValueError(f"nout must be > 0, got {nout}")
        self.backend = backend if backend is not None else default_backend()
        self.neurons = [
            TensorNeuron(nin, nonlin, self.backend, rng) for _ in range(nout)
        ]

    def forward(self, x: Sequence[TensorInput]) -> List[TensorValue]:
        return [n.forward(x) for n in self.neurons]

    __call__ = forward

    def parameters(self) -> List[TensorValue]:
        return [p for n in self.neurons for p in n.parameters()]

    def zero_grad(self) -> None:
        for n in self.neurons:
            n.zero_grad()

    def release(self) -> None:
        for n in self.neurons:
            n.release()

    def __repr__(self) -> str:
        return f"TensorLayer of [{', '.join(repr(n) for n in self.neurons)}]"


class TensorMLP:
    """
    Multi-layer perceptron whose parameters live on one backend.

    Parameters
    ----------
    nin : int
        Number of network inputs.
    nouts : Sequence[int]
        Output width of each layer. All layers but the last use `tanh`.
    backend : Optional[IBackend], optional
        Backend for every parameter. Defaults to `default_backend()`.
    rng : Optional[numpy.random.Generator], optional
        Source of initial weights.

    Notes
    -----
    Can be used as a context manager; leaving the block calls `close()`.
    """

    def __init__(
        self,
        nin: int,
        nouts: Sequence[int],
        backend: Optional[IBackend] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        sizes = [nin, *nouts]
        if len(sizes) < 2:
            raise ValueError("TensorMLP requires at least one layer")
        self.backend = backend if backend is not None else default_backend()
        gen = rng if rng is not None else np.random.default_rng()
        last = len(sizes) - 2
        self.layers = [
            TensorLayer(sizes[i], sizes[i + 1], i != last, self.backend, gen)
            for i in range(len(sizes) - 1)
        ]

    @property
    def nin(self) -> int:
        return self.layers[0].neurons[0].nin

    def forward(self, x: Sequence[TensorInput]) -> List[TensorValue]:
        """
        Raises
        ------
        ArityMismatchError
            If ``len(x) != nin``.
        """
        out: Sequence[TensorInput] = x
        for layer in self.layers:
            out = layer.forward(out)
        return list(out)

    __call__ = forward

    def forward_single(self, x: Sequence[TensorInput]) -> TensorValue:
        """
        Raises
        ------
        InvalidOutputCardinalityError
            If the network does not produce exactly one output.
        """
        out = self.forward(x)
        if len(out) != 1:
            raise InvalidOutputCardinalityError(len(out))
        return out[0]

    def parameters(self) -> List[TensorValue]:
        return [p for layer in self.layers for p in layer.parameters()]

    def zero_grad(self) -> None:
        for layer in self.layers:
            layer.zero_grad()

    def close(self) -> None:
        """Release the storage of every parameter."""
        for layer in self.layers:
            layer.release()

    def __enter__(self) -> "TensorMLP":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        body = "\n  ".join(f"Layer {i}: {l!r}" for i, l in enumerate(self.layers))
        return f"TensorMLP[\n  {body}\n]"
