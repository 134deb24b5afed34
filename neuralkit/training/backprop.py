"""Backpropagation of the per-example cost through a network."""

from __future__ import annotations

import numpy as np

from ..core.errors import NonFiniteError, ShapeError
from ..core.network import NeuralNetwork
from ..core.types import Array, Gradients, Item
from .losses import REGISTRY as LOSS_REGISTRY
from .losses import Loss


def _check_finite(name: str, layer: int, value: Array) -> None:
    if not np.all(np.isfinite(value)):
        raise NonFiniteError(f"{name} of layer {layer} contains NaN or Inf")


def normalize(gradient: Array) -> Array:
    """Scale ``gradient`` to unit Frobenius norm; zero arrays are returned as-is."""

    norm = float(np.linalg.norm(gradient))
    if norm == 0.0:
        return gradient
    return gradient / norm


def compute_gradients(
    network: NeuralNetwork,
    item: Item,
    *,
    normalize_gradients: bool = False,
    loss: str | Loss = "sse",
) -> Gradients:
    """Return the gradient of the cost of ``item`` with respect to every parameter.

    The arrays point uphill: a descent step subtracts them. With
    ``normalize_gradients`` each array is rescaled to unit norm.
    """

    loss_fn = LOSS_REGISTRY.resolve(loss)
    cache = network.feed_forward(item.input, keep_raw=True)
    output = cache.output
    if output.shape != item.output.shape:
        raise ShapeError(
            f"Expected output has shape {item.output.shape}, network produces {output.shape}"
        )

    cost_gradient = loss_fn.gradient(output, item.output)
    last = len(network.weights) - 1
    fn = network.activation_functions[last]
    delta = cost_gradient * fn.derivative(cache.raw[last])
    _check_finite("Error signal", last, delta)

    weight_grads: list[Array] = [np.empty(0)] * len(network.weights)
    bias_grads: list[Array] = [np.empty(0)] * len(network.weights)
    for idx in range(last, -1, -1):
        weight_grads[idx] = delta @ cache.activations[idx].T
        bias_grads[idx] = delta.copy()
        _check_finite("Weight gradient", idx, weight_grads[idx])
        if idx == 0:
            break
        fn = network.activation_functions[idx - 1]
        delta = (network.weights[idx].T @ delta) * fn.derivative(cache.raw[idx - 1])
        _check_finite("Error signal", idx - 1, delta)

    if normalize_gradients:
        weight_grads = [normalize(g) for g in weight_grads]
        bias_grads = [normalize(g) for g in bias_grads]
    return Gradients(weights=weight_grads, biases=bias_grads)


__all__ = ["compute_gradients", "normalize"]
