"""
Fitness ranking for the evolving population.

The fitness function is supplied by the caller: any callable taking a
Genome and returning a float, higher is better. Ranking evaluates it once
per population slot and returns slots ordered worst-first, which is the
ordering every later step of a generation relies on.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .genome import Genome


FitnessFunction = Callable[['Genome'], float]


@dataclass(eq=False)
class FitnessPair:
    """
    Fitness of one population slot.

    Ordering compares fitness only (NaN sorts below everything). Equality
    and hashing compare the slot index only, so two pairs are equal iff
    they refer to the same slot.
    """
    fitness: float
    index: int

    @property
    def sort_key(self) -> Tuple[int, float]:
        if math.isnan(self.fitness):
            return (0, 0.0)
        return (1, self.fitness)

    def __lt__(self, other: 'FitnessPair') -> bool:
        return self.sort_key < other.sort_key

    def __gt__(self, other: 'FitnessPair') -> bool:
        return self.sort_key > other.sort_key

    # Not derived from __eq__, which compares slot indices
    def __le__(self, other: 'FitnessPair') -> bool:
        return self.sort_key <= other.sort_key

    def __ge__(self, other: 'FitnessPair') -> bool:
        return self.sort_key >= other.sort_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FitnessPair):
            return NotImplemented
        return self.index == other.index

    def __hash__(self) -> int:
        return hash(self.index)


def rank_population(
    population: Sequence['Genome'],
    fitness_fn: FitnessFunction,
) -> List[FitnessPair]:
    """
    Evaluate every genome and rank the slots by fitness.

    Each genome's cached fitness is updated as a side effect.

    Args:
        population: Genomes indexed by slot
        fitness_fn: Objective to evaluate

    Returns:
        One FitnessPair per slot, ascending by fitness (index 0 is the worst)
    """
    pairs = []
    for index, genome in enumerate(population):
        score = float(fitness_fn(genome))
        genome.fitness = score
        pairs.append(FitnessPair(fitness=score, index=index))

    # sorted() is stable: equal fitness keeps slot order
    return sorted(pairs)


# =============================================================================
# Reference objective: XOR
# =============================================================================

XOR_CASES = [
    ((0.0, 0.0), 0.0),
    ((0.0, 1.0), 1.0),
    ((1.0, 0.0), 1.0),
    ((1.0, 1.0), 0.0),
]


def _round_half_away(x: float) -> float:
    """Round to nearest integer, halves away from zero."""
    return float(np.sign(x) * np.floor(abs(x) + 0.5))


def xor_fitness(genome: 'Genome') -> float:
    """
    Score a 2-input, 1-output genome on the XOR truth table.

    Each of the four cases adds 1 when the rounded output matches and
    subtracts 1 otherwise, so the score is one of {-4, -2, 0, 2, 4}.
    """
    score = 0.0
    for inputs, expected in XOR_CASES:
        output = genome.evaluate(inputs)[0]
        score += 1.0 if _round_half_away(output) == expected else -1.0
    return score


def xor_truth_table(genome: 'Genome') -> List[Tuple[Tuple[float, float], float, float]]:
    """Return (inputs, raw output, expected) for each XOR case."""
    return [
        (inputs, float(genome.evaluate(inputs)[0]), expected)
        for inputs, expected in XOR_CASES
    ]


def solves_xor(genome: 'Genome') -> bool:
    """True if the rounded outputs match XOR on all four inputs."""
    return xor_fitness(genome) == float(len(XOR_CASES))
