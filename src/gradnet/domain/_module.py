"""
Module (layer) interface definitions.

This module defines the domain-level interface for network components
(neurons, layers, multi-layer perceptrons) using structural subtyping via
`typing.Protocol`.

Any object that implements the required methods is considered a valid
module, independent of inheritance.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IModule(Protocol):
    """
    Domain-level module interface.

    Notes
    -----
    - `forward` consumes a sequence of nodes and returns either a single
      node (neurons) or a list of nodes (layers, networks).
    - `parameters` returns the trainable leaf nodes, which optimizers
      mutate using their accumulated gradients.
    """

    def forward(self, x: Sequence[Any]) -> Any:
        """
        Execute the forward computation of the module.

        Parameters
        ----------
        x : Sequence[node]
            Input nodes. The count must match the module's input arity.
        """
        ...

    def parameters(self) -> Iterable[Any]:
        """
        Return the trainable leaf nodes of the module.
        """
        ...
