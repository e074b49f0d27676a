"""
Common base for autograd nodes.

`GraphNode` holds the bookkeeping shared by scalar (`Value`) and tensor
(`TensorValue`) nodes: the forward payload, the accumulated gradient, the
children the node was derived from, and the backward rule recorded when the
node was created.

Subclasses provide the payload-specific pieces:

- `_zero()` / `_unit()`: the additive identity and the "one unit of
  output" seed for this node's payload,
- `_accumulate(delta)`: ``grad += delta``,
- `_payload_pow(x, p)` / `_payload_positive(x)`: payload helpers used by
  the POW and RELU rules.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from . import _engine
from ._backward_rules import OpKind


class GraphNode:
    """
    Base autograd node.

    Parameters
    ----------
    data : Any
        Forward payload.
    children : Iterable[GraphNode], optional
        Nodes this node was derived from. Duplicates are collapsed, so
        ``x * x`` lists ``x`` once.
    rule : Optional[rule], optional
        Backward rule recorded by the producing operator. ``None`` for
        leaves.
    op : str, optional
        Diagnostic operator label.
    label : str, optional
        Diagnostic user label.

    Notes
    -----
    Nodes compare and hash by identity.
    """

    def __init__(
        self,
        data: Any,
        children: Iterable["GraphNode"] = (),
        rule: Optional[Any] = None,
        op: str = "",
        label: str = "",
    ) -> None:
        self.data = data
        self.grad = self._zero()
        self._children: Tuple["GraphNode", ...] = tuple(dict.fromkeys(children))
        self._rule = rule
        self._op = op
        self.label = label

    @property
    def children(self) -> Tuple["GraphNode", ...]:
        return self._children

    @property
    def rule(self) -> Optional[Any]:
        return self._rule

    @property
    def kind(self) -> OpKind:
        return OpKind.LEAF if self._rule is None else self._rule.kind

    @property
    def op(self) -> str:
        return self._op

    @property
    def is_leaf(self) -> bool:
        return self._rule is None

    def local_backward(self) -> None:
        """
        Push this node's current gradient into its children, once.

        A no-op for leaves.
        """
        if self._rule is not None:
            self._rule.apply(self)

    def backward(self) -> None:
        """
        Compute gradients of this node with respect to every node it depends on.

        See `gradnet.infrastructure.autograd._engine.backward`.
        """
        _engine.backward(self)

    def zero_grad(self) -> None:
        """Reset the gradient of every node reachable from this one to zero."""
        _engine.zero_grad(self)

    def reset_grad(self) -> None:
        """
        Reset the gradient of this node only to zero.

        The node keeps its identity and payload. For tensor nodes `grad`
        is rebound to a fresh zero tensor on the same backend; the previous
        gradient tensor is released by its finalizer once unreferenced.
        Callers that hold ``node.grad`` across a reset keep the old values.
        """
        self.grad = self._zero()

    # ------------------------------------------------------------------
    # Payload hooks
    # ------------------------------------------------------------------

    def _zero(self) -> Any:
        raise NotImplementedError

    def _unit(self) -> Any:
        raise NotImplementedError

    def _accumulate(self, delta: Any) -> None:
        raise NotImplementedError

    @staticmethod
    def _payload_pow(x: Any, p: float) -> Any:
        raise NotImplementedError

    @staticmethod
    def _payload_positive(x: Any) -> Any:
        raise NotImplementedError
