"""Core typing contracts for neuralkit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from .errors import ShapeError

Array = np.ndarray


def as_column(values: Sequence[float] | Array) -> Array:
    """Return ``values`` as a float64 column vector."""

    array = np.asarray(values, dtype=np.float64)
    if array.ndim == 2 and 1 not in array.shape:
        raise ShapeError(f"Expected a vector, got an array of shape {array.shape}")
    return array.reshape(-1, 1)


@dataclass(frozen=True, eq=False)
class Item:
    """A single labelled example."""

    input: Array
    output: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", as_column(self.input))
        object.__setattr__(self, "output", as_column(self.output))

    @classmethod
    def from_lists(cls, inputs: Sequence[float], outputs: Sequence[float]) -> "Item":
        return cls(input=as_column(inputs), output=as_column(outputs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return np.array_equal(self.input, other.input) and np.array_equal(
            self.output, other.output
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass
class FeedForwardCache:
    """Intermediate vectors captured during the forward pass.

    ``activations[0]`` is the input and ``activations[k]`` the activation
    after layer ``k``. ``raw[k]`` holds the pre-activation vector that
    produced ``activations[k + 1]``.
    """

    activations: List[Array]
    raw: List[Array] = field(default_factory=list)

    @property
    def output(self) -> Array:
        return self.activations[-1]


@dataclass
class Gradients:
    """Per-layer cost gradients with the shapes of the network parameters."""

    weights: List[Array]
    biases: List[Array]

    def __len__(self) -> int:
        return len(self.weights)

    def augmented(self) -> List[Array]:
        """Return the gradients as ``[gW | gb]`` matrices."""

        return [np.hstack([w, b]) for w, b in zip(self.weights, self.biases)]


@dataclass
class ScoreRecord:
    """Score of the organism found at ``index`` in a population."""

    index: int
    score: float


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neuralkit.training.pipelines.run_pipeline`."""

    steps: int
    metrics_path: str
    manifest_path: str
    network_path: str = ""
