"""
Autograd graph node contract.

This module defines `IGraphNode`, the structural interface the backward
engine relies on. Scalar and tensor nodes both satisfy it, which is what
lets a single traversal algorithm serve both payload kinds.

A node carries:
- `data`: the forward payload,
- `grad`: an accumulator of the same shape, zero at creation,
- `children`: the nodes it was derived from (set semantics, insertion
  ordered; empty for leaves),
- `local_backward()`: replays this node's backward rule once, adding a
  contribution into each child's `grad`.

The engine additionally needs to seed, accumulate and reset gradients
without knowing the payload type, hence `_unit()`, `_accumulate()` and
`reset_grad()`.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IGraphNode(Protocol):
    """
    Duck-typed autograd node.

    Notes
    -----
    Nodes never form cycles: operators only attach children that already
    exist when the operator is called.
    """

    data: Any
    grad: Any

    @property
    def children(self) -> Sequence["IGraphNode"]: ...

    @property
    def is_leaf(self) -> bool: ...

    def local_backward(self) -> None: ...

    def _unit(self) -> Any: ...

    def _accumulate(self, delta: Any) -> None: ...

    def reset_grad(self) -> None: ...
