"""Stochastic gradient descent over labelled examples."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from ..core.network import NeuralNetwork
from ..core.types import Item
from ..data.dataset import DataSet
from .backprop import compute_gradients

logger = logging.getLogger(__name__)


@dataclass
class GradientDescent:
    """One-example-at-a-time gradient descent on a single network.

    The optimizer is the only writer of ``network`` while it trains; every
    step overwrites the weight (and optionally bias) arrays in place.
    """

    network: NeuralNetwork
    learning_rate: float
    update_biases: bool = True
    normalize_gradients: bool = False
    callbacks: Sequence[object] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        self.callbacks = list(self.callbacks)

    def step(self, item: Item) -> None:
        """Move every parameter against the cost gradient of ``item``."""

        grads = compute_gradients(
            self.network, item, normalize_gradients=self.normalize_gradients
        )
        network = self.network
        weights = [w - self.learning_rate * g for w, g in zip(network.weights, grads.weights)]
        biases = list(network.biases)
        if self.update_biases:
            biases = [b - self.learning_rate * g for b, g in zip(network.biases, grads.biases)]
        # The network is left untouched when the update overflows
        NeuralNetwork(weights, biases, network.activation_functions).check_finite()
        network.weights[:] = weights
        network.biases[:] = biases

    def optimize(self, dataset: DataSet) -> int:
        """Apply :meth:`step` to every training item once; return the step count."""

        steps = 0
        for item in dataset.training_items():
            self.step(item)
            steps += 1
        return steps

    def train(self, dataset: DataSet, epochs: int) -> List[Mapping[str, float]]:
        """Run ``epochs`` full passes and report costs after each one."""

        history: List[Mapping[str, float]] = []
        for epoch in range(1, epochs + 1):
            self.optimize(dataset)
            metrics: Dict[str, float] = {
                "training_cost": dataset.training_cost(self.network),
            }
            if dataset.testing_items_count:
                metrics["testing_cost"] = dataset.testing_cost(self.network)
            logger.debug("epoch %d: %s", epoch, metrics)
            history.append(metrics)
            self._emit_epoch(epoch, metrics)
        return history

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["GradientDescent"]
