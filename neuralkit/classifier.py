"""Turn a network's output vector into a class label."""

from __future__ import annotations

from typing import Callable, Generic, Sequence, TypeVar

import numpy as np

from .core.network import NeuralNetwork
from .core.types import Array
from .data.dataset import DataSet

T = TypeVar("T")


def argmax_class(vector: Array) -> int:
    """Index of the largest entry; the first one wins ties."""

    return int(np.argmax(np.asarray(vector).reshape(-1)))


class Classifier(Generic[T]):
    """Pairs a network with a function interpreting its output layer."""

    def __init__(self, network: NeuralNetwork, interpret: Callable[[Array], T]) -> None:
        self.network = network
        self.interpret = interpret

    def classify(self, input: Sequence[float] | Array) -> T:
        return self.interpret(self.network.compute_output_layer(input))

    __call__ = classify

    def accuracy(self, dataset: DataSet, split: str = "testing") -> float:
        """Fraction of items in ``split`` whose expected output is reproduced."""

        if split == "testing":
            items = dataset.testing_items()
        elif split == "training":
            items = dataset.training_items()
        else:
            raise ValueError(f"Unknown split {split!r}; expected 'training' or 'testing'")
        total = correct = 0
        for item in items:
            total += 1
            if self.classify(item.input) == self.interpret(item.output):
                correct += 1
        return correct / total if total else 0.0


__all__ = ["Classifier", "argmax_class"]
