"""
Shape-, arity- and backend-related exceptions for gradnet.

This module defines the error taxonomy used across the autograd engine and
its compute backends. Every error is raised synchronously by the call that
detects the problem (payload allocation, operator construction, or a network
forward call); nothing is deferred to backward replay.

The shape errors subclass `ValueError` so callers that only care about "bad
input" can catch the builtin, while the backend lifecycle errors subclass
`RuntimeError` to mirror the device errors of array frameworks.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ShapeError(ValueError):
    """
    Raised when a shape is invalid or does not agree with its data.

    Typical causes are non-positive dimensions or an initial data buffer
    whose length differs from the element count implied by the shape.
    """


class ShapeMismatchError(ShapeError):
    """
    Raised when an elementwise operation receives operands of different shapes.

    Attributes
    ----------
    op : str
        The operation that was attempted (e.g., "add", "multiply").
    shape_a : tuple[int, ...]
        Shape of the left operand.
    shape_b : tuple[int, ...]
        Shape of the right operand.
    """

    def __init__(
        self, op: str, shape_a: Sequence[int], shape_b: Sequence[int]
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            Operation name.
        shape_a : Sequence[int]
            Shape of the left operand (or of the payload being updated).
        shape_b : Sequence[int]
            Shape of the right operand (or of the gradient buffer).
        """
        self.op = op
        self.shape_a = tuple(shape_a)
        self.shape_b = tuple(shape_b)
        super().__init__(
            f"{op}: shape mismatch {self.shape_a} vs {self.shape_b}."
        )


class RankError(ShapeError):
    """
    Raised when a matrix product receives an operand that is not rank-2.

    Attributes
    ----------
    op : str
        The operation that was attempted.
    rank : int
        The offending operand rank.
    """

    def __init__(self, op: str, rank: int, expected: int = 2) -> None:
        self.op = op
        self.rank = int(rank)
        self.expected = int(expected)
        super().__init__(
            f"{op} requires rank-{self.expected} operands, got rank {self.rank}."
        )


class DimensionMismatchError(ShapeError):
    """
    Raised when matrix product operands have incompatible inner dimensions.

    Attributes
    ----------
    shape_a : tuple[int, ...]
        Shape of the left operand ``(m, k)``.
    shape_b : tuple[int, ...]
        Shape of the right operand ``(k', n)`` with ``k != k'``.
    """

    def __init__(self, shape_a: Sequence[int], shape_b: Sequence[int]) -> None:
        self.shape_a = tuple(shape_a)
        self.shape_b = tuple(shape_b)
        super().__init__(f"Cannot multiply {self.shape_a} x {self.shape_b}.")


class ArityMismatchError(ValueError):
    """
    Raised when a network component receives the wrong number of inputs.

    Attributes
    ----------
    expected : int
        Number of inputs the component was built for.
    got : int
        Number of inputs actually supplied.
    """

    def __init__(self, expected: int, got: int) -> None:
        self.expected = int(expected)
        self.got = int(got)
        super().__init__(f"Expected {self.expected} inputs, got {self.got}.")


class InvalidOutputCardinalityError(RuntimeError):
    """
    Raised when a single-output accessor is used on a multi-output network.
    """

    def __init__(self, got: int) -> None:
        self.got = int(got)
        super().__init__(f"Expected single output, got {self.got}.")


class BackendMismatchError(RuntimeError):
    """
    Raised when payloads allocated by two different backends are combined.

    Every payload is bound to the backend instance that allocated it; mixing
    them would hand one substrate a handle it does not own.
    """

    def __init__(self, backend_a: str, backend_b: str) -> None:
        self.backend_a = backend_a
        self.backend_b = backend_b
        super().__init__(f"Backend mismatch: '{backend_a}' vs '{backend_b}'.")


class BackendUnavailableError(RuntimeError):
    """
    Raised when an accelerated backend cannot be initialized.

    Callers are expected to fall back to the host backend; see
    `gradnet.infrastructure.backends.create_backend`.
    """

    def __init__(self, backend: str, reason: Optional[str] = None) -> None:
        self.backend = backend
        self.reason = reason
        msg = f"Backend '{backend}' is not available."
        if reason:
            msg = f"{msg} Reason: {reason}"
        super().__init__(msg)


class BackendReleasedError(RuntimeError):
    """
    Raised when a released payload or a closed backend is used.
    """

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"{what} has already been released.")
