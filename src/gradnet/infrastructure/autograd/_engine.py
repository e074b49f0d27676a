"""
Reverse-mode graph traversal.

Given a terminal node, `backward` orders the dependency graph depth-first
(children before the node that depends on them), seeds the terminal with one
unit of output, and replays every node's backward rule in reverse order, so
each node's gradient is complete before it is pushed to its children.

The traversal is identity-based and visits each node once even when it is
reachable through several parents (diamond dependencies). It uses an
explicit stack, so graph depth is not bounded by the interpreter's
recursion limit.

Gradient bookkeeping
--------------------
- Leaf gradients accumulate across calls. Calling `backward` twice without
  `zero_grad` doubles every leaf gradient.
- Interior gradients are scratch space for one replay. They are cleared
  before each replay so contributions already delivered to the leaves are
  not propagated a second time.
"""

from __future__ import annotations

from typing import Iterator, List

from ...domain._node import IGraphNode


def iter_reachable(root: IGraphNode) -> Iterator[IGraphNode]:
    """
    Yield every node reachable from `root` exactly once, in no particular order.
    """
    seen: set[int] = set()
    stack: List[IGraphNode] = [root]
    while stack:
        node = stack.pop()
        nid = id(node)
        if nid in seen:
            continue
        seen.add(nid)
        yield node
        stack.extend(node.children)


def topological_order(root: IGraphNode) -> List[IGraphNode]:
    """
    Return the nodes reachable from `root`, children before parents.

    Parameters
    ----------
    root : IGraphNode
        Terminal node.

    Returns
    -------
    list[IGraphNode]
        Each reachable node once; `root` is last. Iterating the list in
        reverse visits every node before all nodes it depends on.
    """
    topo: List[IGraphNode] = []
    visited: set[int] = set()
    stack: list[tuple[IGraphNode, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            topo.append(node)
            continue

        nid = id(node)
        if nid in visited:
            continue
        visited.add(nid)

        stack.append((node, True))
        for child in reversed(node.children):
            if id(child) not in visited:
                stack.append((child, False))

    return topo


def backward(root: IGraphNode) -> None:
    """
    Backpropagate one unit of output from `root` to every node it depends on.

    Parameters
    ----------
    root : IGraphNode
        Terminal node. Its gradient is seeded with 1 (scalar) or an all-ones
        payload of its shape (tensor).
    """
    topo = topological_order(root)

    for node in topo:
        if not node.is_leaf:
            node.reset_grad()

    root._accumulate(root._unit())

    for node in reversed(topo):
        node.local_backward()


def zero_grad(root: IGraphNode) -> None:
    """
    Reset the gradient of every node reachable from `root` to zero.

    Forward values are left untouched.
    """
    for node in iter_reachable(root):
        node.reset_grad()
