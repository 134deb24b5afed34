"""Activation functions for neuralkit.

Only a closed set of activation functions is supported. A network persists
the integer tag of each layer's function and looks the implementation up on
decode, so a saved model never carries executable code.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Dict, NamedTuple, Sequence

import numpy as np

from .errors import UnknownActivationError
from .types import Array

ScalarOrArray = float | Array


def _finish(result: Array) -> ScalarOrArray:
    return float(result) if np.ndim(result) == 0 else result


def _identity(x: Array) -> Array:
    return np.array(x, dtype=np.float64, copy=True)


def _identity_deriv(x: Array) -> Array:
    return np.ones_like(x, dtype=np.float64)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def _relu_deriv(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def sigmoid(x: Array) -> Array:
    """Logistic function evaluated without overflowing ``exp``."""

    e = np.exp(-np.abs(x))
    return np.where(x >= 0, 1.0 / (1.0 + e), e / (1.0 + e))


def _sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def _tanh(x: Array) -> Array:
    return np.tanh(x)


def _tanh_deriv(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


def _step(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def _step_deriv(x: Array) -> Array:
    return np.zeros_like(x, dtype=np.float64)


class _Pair(NamedTuple):
    compute: Callable[[Array], Array]
    derivative: Callable[[Array], Array]


class ActivationFunction(IntEnum):
    """Supported activation functions, valued by their persisted tag."""

    IDENTITY = 0
    RELU = 1
    SIGMOID = 2
    TANH = 3
    STEP = 4

    @classmethod
    def from_tag(cls, tag: int) -> "ActivationFunction":
        try:
            return cls(int(tag))
        except ValueError as exc:
            raise UnknownActivationError(f"Unknown activation tag: {tag}") from exc

    @classmethod
    def parse(cls, name: "str | int | ActivationFunction") -> "ActivationFunction":
        """Resolve a member from a config value (name, tag or member)."""

        if isinstance(name, ActivationFunction):
            return name
        if isinstance(name, int):
            return cls.from_tag(name)
        key = str(name).strip().lower().replace("-", "_")
        key = _ALIASES.get(key, key)
        try:
            return cls[key.upper()]
        except KeyError as exc:
            available = ", ".join(member.name.lower() for member in cls)
            raise UnknownActivationError(
                f"Unknown activation {name!r}. Available activations: {available}"
            ) from exc

    @property
    def tag(self) -> int:
        return int(self.value)

    def compute(self, x: ScalarOrArray) -> ScalarOrArray:
        return _finish(_TABLE[self].compute(np.asarray(x, dtype=np.float64)))

    def derivative(self, x: ScalarOrArray) -> ScalarOrArray:
        """Derivative of :meth:`compute` (0 at the kinks of ReLU and step)."""

        return _finish(_TABLE[self].derivative(np.asarray(x, dtype=np.float64)))

    __call__ = compute


_ALIASES = {
    "hyper_tan": "tanh",
    "hypertan": "tanh",
    "linear": "identity",
    "rectified_linear": "relu",
}

_TABLE: Dict[ActivationFunction, _Pair] = {
    ActivationFunction.IDENTITY: _Pair(_identity, _identity_deriv),
    ActivationFunction.RELU: _Pair(relu, _relu_deriv),
    ActivationFunction.SIGMOID: _Pair(sigmoid, _sigmoid_deriv),
    ActivationFunction.TANH: _Pair(_tanh, _tanh_deriv),
    ActivationFunction.STEP: _Pair(_step, _step_deriv),
}


def resolve_all(
    functions: "ActivationFunction | str | Sequence[ActivationFunction | str]",
    count: int,
) -> list[ActivationFunction]:
    """Broadcast a single activation or parse a per-layer list of ``count``."""

    if isinstance(functions, (str, int)):
        return [ActivationFunction.parse(functions)] * count
    return [ActivationFunction.parse(item) for item in functions]


__all__ = ["ActivationFunction", "relu", "resolve_all", "sigmoid"]
