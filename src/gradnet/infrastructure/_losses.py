"""
Loss functions for gradnet.

Losses are plain functions composed from node operators, so they work for
both `Value` and `TensorValue` nodes and the returned node can be
backpropagated directly.

Currently implemented losses:
- squared_error      : ``(prediction - target) ** 2``
- mean_squared_error : mean of the squared errors over paired sequences

Targets may be nodes or plain numbers. Numbers are converted to constant
leaves by the prediction's own operators.
"""

from __future__ import annotations

from typing import Sequence, TypeVar, Union

from .autograd._node import GraphNode

N = TypeVar("N", bound=GraphNode)


def squared_error(prediction: N, target: Union[N, float]) -> N:
    """
    Squared difference of one prediction and one target.

    Parameters
    ----------
    prediction : Value | TensorValue
        Predicted node.
    target : Value | TensorValue | float
        Ground truth. Tensor targets must match the prediction shape.

    Returns
    -------
    Value | TensorValue
        ``(prediction - target) * (prediction - target)``.
    """
    diff = prediction - target
    return diff * diff


def mean_squared_error(
    predictions: Sequence[N], targets: Sequence[Union[N, float]]
) -> N:
    """
    Mean of squared differences over equal-length sequences.

    Parameters
    ----------
    predictions : Sequence[Value | TensorValue]
        Predicted nodes.
    targets : Sequence[Value | TensorValue | float]
        Ground-truth values, paired with `predictions` by position.

    Returns
    -------
    Value | TensorValue
        ``sum_i (p_i - t_i)^2 / n``.

    Raises
    ------
    ValueError
        If the sequences are empty or differ in length.
    """
    preds = list(predictions)
    tgts = list(targets)
    if len(preds) != len(tgts):
        raise ValueError(
            f"Predictions and targets must have the same length, "
            f"got {len(preds)} and {len(tgts)}"
        )
    if not preds:
        raise ValueError("mean_squared_error requires at least one prediction")

    total = squared_error(preds[0], tgts[0])
    for p, t in zip(preds[1:], tgts[1:]):
        total = total + squared_error(p, t)
    return total * (1.0 / len(preds))
