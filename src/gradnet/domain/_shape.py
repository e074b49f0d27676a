"""
Immutable tensor shape descriptor.

A `Shape` is a tuple of positive integer dimensions. The empty shape
``Shape()`` is the rank-0 scalar case and holds exactly one element.

The class is backend-independent and is shared by every layer of the
package; payloads, backends and autograd nodes all compare shapes through
it.
"""

from __future__ import annotations

import operator
from typing import Iterable, Iterator, Union

from ._errors import ShapeError

ShapeLike = Union["Shape", int, Iterable[int]]


class Shape:
    """
    Immutable positive-integer dimension vector.

    Parameters
    ----------
    *dims : int
        Dimensions, each a positive integer. No dims means a scalar.

    Raises
    ------
    ShapeError
        If any dimension is not a positive integer.

    Notes
    -----
    - Equality also accepts plain tuples, so ``Shape(2, 3) == (2, 3)``.
    - `__slots__` keeps instances small and prevents mutation by accident.
    """

    __slots__ = ("_dims",)

    def __init__(self, *dims: int) -> None:
        checked = []
        for i, d in enumerate(dims):
            if isinstance(d, bool):
                raise ShapeError(f"Dimension {i} must be an int, got bool.")
            try:
                v = operator.index(d)
            except TypeError:
                raise ShapeError(
                    f"Dimension {i} must be an int, got {type(d).__name__}."
                ) from None
            if v <= 0:
                raise ShapeError(f"Dimension {i} must be positive, got {v}.")
            checked.append(v)
        self._dims = tuple(checked)

    @classmethod
    def of(cls, shape: ShapeLike) -> "Shape":
        """
        Normalize a shape-like value into a `Shape`.

        Parameters
        ----------
        shape : Shape | int | Iterable[int]
            An existing Shape (returned as-is), a single dimension, or an
            iterable of dimensions.

        Returns
        -------
        Shape
            The normalized shape.
        """
        if isinstance(shape, Shape):
            return shape
        if isinstance(shape, int) and not isinstance(shape, bool):
            return cls(shape)
        return cls(*tuple(shape))

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    @property
    def rank(self) -> int:
        return len(self._dims)

    @property
    def size(self) -> int:
        """Number of elements (1 for the scalar shape)."""
        n = 1
        for d in self._dims:
            n *= d
        return n

    def __len__(self) -> int:
        return len(self._dims)

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __getitem__(self, index: int) -> int:
        return self._dims[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self._dims == other._dims
        if isinstance(other, tuple):
            return self._dims == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dims)

    def __repr__(self) -> str:
        return f"Shape({', '.join(str(d) for d in self._dims)})"

    def __str__(self) -> str:
        return f"[{', '.join(str(d) for d in self._dims)}]"
