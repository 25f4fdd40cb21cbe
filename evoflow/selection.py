"""
Parent selection strategies.

A strategy receives the full ranked pool (ascending fitness, see
fitness.rank_population) and the slots it must fill, and returns one
CrossoverFamily per slot naming the two parents to recombine.

The set of strategies is closed:
- TournamentStrategy: best of `rounds` random draws, once per parent
- PrimeParentStrategy: two distinct parents from the top `rate` fraction
- RouletteStrategy: fitness-proportional draws

Several strategies can be configured together; allocate_slots splits the
crossover slots between them by relative weight.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union
import numpy as np

from .fitness import FitnessPair

logger = logging.getLogger(__name__)

# Absorbs float error in products like 10 * (1 - 0.9) or 100 * 0.29
_FLOOR_TOLERANCE = 1e-9


@dataclass(frozen=True)
class CrossoverFamily:
    """Parents chosen for one child slot, with their fitness at selection time."""
    child_index: int
    parent_a_index: int
    parent_b_index: int
    parent_a_fitness: float
    parent_b_fitness: float


@dataclass(frozen=True)
class TournamentStrategy:
    """Each parent is the fittest of `rounds` uniform draws from the pool."""
    weight: int = 1
    rounds: int = 2


@dataclass(frozen=True)
class PrimeParentStrategy:
    """Both parents come from the top `rate` fraction of the pool."""
    weight: int = 1
    rate: float = 0.1


@dataclass(frozen=True)
class RouletteStrategy:
    """Parents drawn with probability proportional to fitness."""
    weight: int = 1


StrategyConfig = Union[TournamentStrategy, PrimeParentStrategy, RouletteStrategy]

STRATEGY_TYPES = (TournamentStrategy, PrimeParentStrategy, RouletteStrategy)


def _family(slot: FitnessPair, parent_a: FitnessPair, parent_b: FitnessPair) -> CrossoverFamily:
    return CrossoverFamily(
        child_index=slot.index,
        parent_a_index=parent_a.index,
        parent_b_index=parent_b.index,
        parent_a_fitness=parent_a.fitness,
        parent_b_fitness=parent_b.fitness,
    )


# =============================================================================
# Tournament
# =============================================================================

def _tournament_winner(pool: Sequence[FitnessPair], rounds: int, rng: np.random.Generator) -> int:
    """Run one tournament and return the winning pool position."""
    winner = int(rng.integers(len(pool)))
    for _ in range(rounds - 1):
        challenger = int(rng.integers(len(pool)))
        if pool[challenger] > pool[winner]:
            winner = challenger
    return winner


def _tournament_offspring(
    strategy: TournamentStrategy,
    pool: Sequence[FitnessPair],
    slots: Sequence[FitnessPair],
    rng: np.random.Generator,
) -> List[CrossoverFamily]:
    families = []
    for slot in slots:
        # Independent tournaments: the same slot may win both
        a = _tournament_winner(pool, strategy.rounds, rng)
        b = _tournament_winner(pool, strategy.rounds, rng)
        families.append(_family(slot, pool[a], pool[b]))
    return families


# =============================================================================
# Prime parent (elite window)
# =============================================================================

def floor_fraction(count: int, rate: float) -> int:
    """floor(count * rate), tolerant of representation error in rate."""
    return math.floor(count * rate + _FLOOR_TOLERANCE)


def elite_window_size(pool_size: int, rate: float) -> int:
    """Number of top-ranked slots in an elite window, never less than one."""
    return max(1, floor_fraction(pool_size, rate))


def _prime_parent_offspring(
    strategy: PrimeParentStrategy,
    pool: Sequence[FitnessPair],
    slots: Sequence[FitnessPair],
    rng: np.random.Generator,
) -> List[CrossoverFamily]:
    window = elite_window_size(len(pool), strategy.rate)
    start = len(pool) - window

    if window < 2:
        # Distinct parents are impossible; the single elite slot is paired with itself
        logger.debug("Elite window of size 1, pairing best slot %d with itself", pool[start].index)
        return [_family(slot, pool[start], pool[start]) for slot in slots]

    families = []
    for slot in slots:
        a = int(rng.integers(start, len(pool)))
        b = int(rng.integers(start, len(pool)))
        while b == a:
            b = int(rng.integers(start, len(pool)))
        families.append(_family(slot, pool[a], pool[b]))
    return families


# =============================================================================
# Roulette
# =============================================================================

def _roulette_offspring(
    strategy: RouletteStrategy,
    pool: Sequence[FitnessPair],
    slots: Sequence[FitnessPair],
    rng: np.random.Generator,
) -> List[CrossoverFamily]:
    fitnesses = np.array([pair.fitness for pair in pool], dtype=float)
    if np.any(np.isnan(fitnesses)) or np.any(fitnesses < 0):
        raise ValueError("Roulette selection requires non-negative fitness values")
    cumulative = np.cumsum(fitnesses)
    fitness_sum = cumulative[-1]
    if fitness_sum <= 0:
        raise ValueError("Roulette selection requires a positive fitness sum")

    def spin() -> int:
        # First position whose cumulative fitness exceeds the draw
        draw = rng.uniform(0.0, fitness_sum)
        return min(int(np.searchsorted(cumulative, draw, side='right')), len(pool) - 1)

    families = []
    for slot in slots:
        a = spin()
        b = spin()
        families.append(_family(slot, pool[a], pool[b]))
    return families


# =============================================================================
# Dispatch
# =============================================================================

def create_offspring(
    strategy: StrategyConfig,
    ranked_pool: Sequence[FitnessPair],
    target_slots: Sequence[FitnessPair],
    rng: np.random.Generator,
) -> List[CrossoverFamily]:
    """
    Choose parents for each target slot.

    Args:
        strategy: One of the strategy configurations
        ranked_pool: Candidate parents, ascending by fitness
        target_slots: Slots to fill; one family is returned per slot, in order
        rng: Random generator

    Returns:
        List of CrossoverFamily, child_index matching each target slot
    """
    if not ranked_pool:
        raise ValueError("Cannot select parents from an empty pool")

    if isinstance(strategy, TournamentStrategy):
        return _tournament_offspring(strategy, ranked_pool, target_slots, rng)
    if isinstance(strategy, PrimeParentStrategy):
        return _prime_parent_offspring(strategy, ranked_pool, target_slots, rng)
    if isinstance(strategy, RouletteStrategy):
        return _roulette_offspring(strategy, ranked_pool, target_slots, rng)
    raise TypeError(f"Unknown selection strategy: {strategy!r}")


def allocate_slots(
    strategies: Sequence[StrategyConfig],
    slots: Sequence[FitnessPair],
) -> List[Tuple[StrategyConfig, List[FitnessPair]]]:
    """
    Split slots between strategies in proportion to their weights.

    Strategies are visited in order and each takes the next
    floor(weight / total_weight * len(slots)) slots. Shares are rounded down
    independently, so trailing slots can be left unassigned.

    Returns:
        (strategy, assigned slots) for every configured strategy
    """
    total_weight = sum(s.weight for s in strategies)
    if total_weight <= 0:
        return []

    assignments = []
    cursor = 0
    for strategy in strategies:
        share = (strategy.weight * len(slots)) // total_weight
        assignments.append((strategy, list(slots[cursor:cursor + share])))
        cursor += share
    return assignments
