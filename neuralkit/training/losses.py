"""Cost functions available to backpropagation.

A network's cost is the squared Euclidean distance between its output and
the expected output. ``mse`` divides that by the output width.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.types import Array

CostFn = Callable[[Array, Array], float]
GradientFn = Callable[[Array, Array], Array]


@dataclass(frozen=True)
class Loss:
    """A cost and its derivative with respect to the network output."""

    name: str
    cost: CostFn
    gradient: GradientFn

    def __call__(self, output: Array, expected: Array) -> tuple[float, Array]:
        return self.cost(output, expected), self.gradient(output, expected)


class LossRegistry:
    """Named losses plus aliases resolving to them."""

    def __init__(self) -> None:
        self._losses: Dict[str, Loss] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, loss: Loss, *aliases: str) -> Loss:
        self._losses[loss.name] = loss
        for alias in aliases:
            self._aliases[alias] = loss.name
        return loss

    def names(self) -> Iterable[str]:
        return sorted(set(self._losses) | set(self._aliases))

    def resolve(self, name: str | Loss) -> Loss:
        if isinstance(name, Loss):
            return name
        key = self._aliases.get(name, name)
        if key not in self._losses:
            raise KeyError(f"Unknown loss {name!r}. Available losses: {', '.join(self.names())}")
        return self._losses[key]


REGISTRY = LossRegistry()

REGISTRY.register(
    Loss(
        "sse",
        cost=lambda output, expected: float(np.sum(np.square(output - expected))),
        gradient=lambda output, expected: 2.0 * (output - expected),
    ),
    "squared_distance",
)
REGISTRY.register(
    Loss(
        "mse",
        cost=lambda output, expected: float(np.mean(np.square(output - expected))),
        gradient=lambda output, expected: 2.0 * (output - expected) / output.size,
    ),
)

__all__ = ["Loss", "LossRegistry", "REGISTRY"]
