"""Generic genetic algorithm with truncation selection."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Generic, List, MutableSequence, Optional, TypeVar

import numpy as np

from ..core.errors import ShapeError
from ..core.types import ScoreRecord

logger = logging.getLogger(__name__)

S = TypeVar("S")

ScoreFn = Callable[[S], float]
BreedFn = Callable[[S, S], S]


@dataclass
class GeneticAlgorithm(Generic[S]):
    """Evolve a population of any scoreable, breedable organism.

    Each generation the population is scored (higher is better) and sorted
    ascending. The lowest ``floor(fitness * n)`` organisms are replaced by
    children of two distinct parents drawn uniformly from the rest.

    Parameters
    ----------
    score:
        Maps an organism to its fitness.
    breed:
        Produces a child from two parents.
    fitness:
        Fraction of the population replaced each generation, in ``(0, 1)``.
    rng:
        Source of the parent draws; seed it for reproducible runs.
    """

    score: ScoreFn
    breed: BreedFn
    fitness: float
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def __post_init__(self) -> None:
        if not 0.0 < self.fitness < 1.0:
            raise ValueError(f"fitness must lie strictly between 0 and 1, got {self.fitness}")

    def cutoff(self, population_size: int) -> int:
        return int(math.floor(self.fitness * population_size))

    def evaluate(self, organisms: MutableSequence[S]) -> List[ScoreRecord]:
        """Score every organism and return the records sorted ascending."""

        records = [ScoreRecord(index=idx, score=float(self.score(org))) for idx, org in enumerate(organisms)]
        records.sort(key=lambda record: record.score)
        return records

    def select_parents(self, cutoff: int, population_size: int) -> tuple[int, int]:
        """Draw two ranks from ``[cutoff, population_size)``, distinct when possible."""

        first = int(self.rng.integers(cutoff, population_size))
        second = int(self.rng.integers(cutoff, population_size))
        if population_size - cutoff > 1:
            while second == first:
                second = int(self.rng.integers(cutoff, population_size))
        return first, second

    def evolve(
        self,
        organisms: MutableSequence[S],
        generations: int,
        on_generation: Optional[Callable[[MutableSequence[S]], None]] = None,
    ) -> List[ScoreRecord]:
        """Evolve ``organisms`` in place for ``generations`` generations.

        Returns the sorted score records of the final generation, so
        ``organisms[records[-1].index]`` is its best scored survivor. Zero
        generations is a no-op and returns an empty list.
        """

        if generations < 0:
            raise ValueError(f"generations must be non-negative, got {generations}")
        if len(organisms) < 2:
            raise ShapeError(f"A population needs at least 2 organisms, got {len(organisms)}")

        records: List[ScoreRecord] = []
        size = len(organisms)
        cutoff = self.cutoff(size)
        for generation in range(generations):
            records = self.evaluate(organisms)
            for rank in range(cutoff):
                p1, p2 = self.select_parents(cutoff, size)
                father = organisms[records[p1].index]
                mother = organisms[records[p2].index]
                organisms[records[rank].index] = self.breed(father, mother)
            logger.debug(
                "generation %d: best=%.6g worst=%.6g",
                generation + 1,
                records[-1].score,
                records[0].score,
            )
            if on_generation is not None:
                on_generation(organisms)
        return records


def evolve(
    organisms: MutableSequence[S],
    *,
    score: ScoreFn,
    breed: BreedFn,
    fitness: float,
    generations: int,
    rng: np.random.Generator | None = None,
    on_generation: Optional[Callable[[MutableSequence[S]], None]] = None,
) -> List[ScoreRecord]:
    """Functional front end to :class:`GeneticAlgorithm`."""

    algorithm = GeneticAlgorithm(
        score=score,
        breed=breed,
        fitness=fitness,
        rng=rng if rng is not None else np.random.default_rng(),
    )
    return algorithm.evolve(organisms, generations, on_generation=on_generation)


__all__ = ["GeneticAlgorithm", "ScoreRecord", "evolve"]
