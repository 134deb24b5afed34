"""Breeding policies and a genetic optimizer for neural networks."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.activations import ActivationFunction
from ..core.errors import ShapeError
from ..core.network import NeuralNetwork
from ..data.dataset import DataSet
from .genetic import GeneticAlgorithm

logger = logging.getLogger(__name__)

BreedingFunction = Callable[[NeuralNetwork, NeuralNetwork], NeuralNetwork]
Range = Tuple[float, float]


def arithmetic_mean(mother: NeuralNetwork, father: NeuralNetwork) -> NeuralNetwork:
    """Child whose every weight and bias is the mean of its parents'."""

    if mother.shape != father.shape:
        raise ShapeError(f"Cannot breed networks of shapes {mother.shape} and {father.shape}")
    return NeuralNetwork(
        [0.5 * (m + f) for m, f in zip(mother.weights, father.weights)],
        [0.5 * (m + f) for m, f in zip(mother.biases, father.biases)],
        list(mother.activation_functions),
    )


def arithmetic_mean_with_mutation(
    mutation_frequency: float = 0.2,
    mutation_range: Range = (-10.0, 10.0),
    rng: np.random.Generator | None = None,
) -> BreedingFunction:
    """Mean crossover that scales each entry, with probability
    ``mutation_frequency``, by a uniform draw from ``mutation_range``."""

    if not 0.0 <= mutation_frequency <= 1.0:
        raise ValueError(f"mutation_frequency must lie in [0, 1], got {mutation_frequency}")
    generator = rng if rng is not None else np.random.default_rng()
    low, high = mutation_range

    def _mutate(values: np.ndarray) -> np.ndarray:
        mask = generator.random(values.shape) < mutation_frequency
        factors = generator.uniform(low, high, size=int(mask.sum()))
        values[mask] *= factors
        return values

    def breed(mother: NeuralNetwork, father: NeuralNetwork) -> NeuralNetwork:
        child = arithmetic_mean(mother, father)
        child.weights = [_mutate(w) for w in child.weights]
        child.biases = [_mutate(b) for b in child.biases]
        return child

    return breed


@dataclass
class GeneticOptimizer:
    """Search for network parameters of a fixed shape by genetic evolution.

    Organisms are scored with the reciprocal of their mean training cost on
    ``dataset``.
    """

    shape: Sequence[int]
    activation_functions: ActivationFunction | str | Sequence[ActivationFunction | str]
    dataset: DataSet
    breed: Optional[BreedingFunction] = None
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def __post_init__(self) -> None:
        if self.breed is None:
            self.breed = arithmetic_mean_with_mutation(rng=self.rng)

    def score(self, network: NeuralNetwork) -> float:
        cost = self.dataset.training_cost(network)
        return math.inf if cost == 0.0 else 1.0 / cost

    def initial_population(
        self,
        population_size: int,
        weight_range: Range = (-10.0, 10.0),
        bias_range: Range = (-10.0, 10.0),
    ) -> List[NeuralNetwork]:
        return [
            NeuralNetwork.random(
                self.shape,
                self.activation_functions,
                rng=self.rng,
                weight_range=weight_range,
                bias_range=bias_range,
            )
            for _ in range(population_size)
        ]

    def find_optimal_network(
        self,
        population_size: int,
        eliminating_portion: float,
        generations: int,
        weight_range: Range = (-10.0, 10.0),
        bias_range: Range = (-10.0, 10.0),
        on_generation: Optional[Callable[[List[NeuralNetwork]], None]] = None,
    ) -> NeuralNetwork:
        """Evolve a random population and return its best scored network."""

        population = self.initial_population(population_size, weight_range, bias_range)
        algorithm: GeneticAlgorithm[NeuralNetwork] = GeneticAlgorithm(
            score=self.score,
            breed=self.breed,  # type: ignore[arg-type]
            fitness=eliminating_portion,
            rng=self.rng,
        )
        records = algorithm.evolve(population, generations, on_generation=on_generation)
        if not records:
            records = algorithm.evaluate(population)
        best = population[records[-1].index]
        logger.info("best network %s scored %.6g", best.shape, records[-1].score)
        return best


__all__ = [
    "BreedingFunction",
    "GeneticOptimizer",
    "arithmetic_mean",
    "arithmetic_mean_with_mutation",
]
