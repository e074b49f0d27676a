"""
Domain-level optimizer contracts for gradnet.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations.

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Optimizers mutate leaf parameter values using their accumulated
  gradients. How those gradients were computed is outside this protocol.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `step()` applies one optimization update to managed parameters.
    - `zero_grad()` resets gradients of managed parameters.
    """

    def step(self) -> None: ...

    def zero_grad(self) -> None: ...

    @property
    def params(self) -> Iterable[object]: ...
