"""
Generation scheduler: the main evolution loop.

One generation:
1. Rank the population by fitness (worst first)
2. Mark the lowest-ranked slots for replacement
3. Split them into crossover slots and copy slots
4. Fill crossover slots with recombined children, split across the
   configured selection strategies by weight
5. Fill copy slots with mutated clones of elite genomes
6. Mutate every genome in the population

All parents and clone sources are read from the population as it stood at
the start of the generation; replacements are written only once every
child has been built.
"""

import logging
import time
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Callable, Sequence
import numpy as np

from .activations import DEFAULT_ACTIVATION, get_activation
from .genome import Genome, create_random_genome
from .fitness import FitnessPair, FitnessFunction, rank_population
from .selection import (
    StrategyConfig,
    STRATEGY_TYPES,
    TournamentStrategy,
    PrimeParentStrategy,
    allocate_slots,
    create_offspring,
    elite_window_size,
    floor_fraction,
)
from .history import EvolutionHistory, GenerationStats

logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""
    population_size: int
    architecture: List[int]

    # Evolution rates
    survival_rate: float = 0.0
    crossover_rate: float = 0.0
    mutation_rate: float = 0.0

    # Fraction of the ranked population cloned into copy slots
    elite_rate: float = 0.1

    activation: str = DEFAULT_ACTIVATION
    strategies: List[StrategyConfig] = field(default_factory=list)
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration; raises ValueError on the first problem."""
        self.architecture = list(self.architecture)
        self.strategies = list(self.strategies)

        if self.population_size <= 1:
            raise ValueError("population_size must be greater than 1")
        if len(self.architecture) < 2:
            raise ValueError("architecture needs an input size and at least one layer")
        if any(width <= 0 for width in self.architecture):
            raise ValueError("architecture cannot contain zero-width layers")

        for name in ('survival_rate', 'crossover_rate', 'mutation_rate', 'elite_rate'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0..=1.0, got {value}")

        get_activation(self.activation)

        for strategy in self.strategies:
            if not isinstance(strategy, STRATEGY_TYPES):
                raise ValueError(f"Unknown selection strategy: {strategy!r}")
            if strategy.weight < 0:
                raise ValueError(f"Strategy weight must be non-negative: {strategy!r}")
            if isinstance(strategy, TournamentStrategy) and strategy.rounds < 1:
                raise ValueError(f"Tournament rounds must be at least 1: {strategy!r}")
            if isinstance(strategy, PrimeParentStrategy) and not 0.0 <= strategy.rate <= 1.0:
                raise ValueError(f"Prime parent rate must be between 0.0..=1.0: {strategy!r}")

    @property
    def effective_crossover_rate(self) -> float:
        """Crossover rate actually used; zero when no strategy is configured."""
        if not self.strategies:
            return 0.0
        return self.crossover_rate

    def to_dict(self) -> Dict[str, Any]:
        return {
            'population_size': self.population_size,
            'architecture': list(self.architecture),
            'survival_rate': self.survival_rate,
            'crossover_rate': self.crossover_rate,
            'mutation_rate': self.mutation_rate,
            'elite_rate': self.elite_rate,
            'activation': self.activation,
            'strategies': [
                {'type': type(s).__name__, **asdict(s)} for s in self.strategies
            ],
            'seed': self.seed,
        }


@dataclass
class EvolutionResult:
    """Results from a training run."""
    generations_completed: int
    best_fitness: float
    best_genome: Genome
    history: EvolutionHistory
    runtime_seconds: float
    early_stopped: bool

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Generations: {self.generations_completed}",
            f"Best fitness: {self.best_fitness:.4f}",
            f"Runtime: {self.runtime_seconds:.1f}s",
            f"Early stopped: {self.early_stopped}",
            f"Best genome: {self.best_genome!r}",
        ]
        return '\n'.join(lines)


class GenerationScheduler:
    """
    Evolves a fixed-size population of genomes toward a fitness objective.

    The population is a flat list addressed by slot index. Slot indices are
    stable within a generation; genomes in replaced slots are swapped for
    new objects.
    """

    def __init__(
        self,
        config: EvolutionConfig,
        fitness_fn: FitnessFunction,
        population: Optional[Sequence[Genome]] = None,
    ):
        """
        Initialize the scheduler and evaluate the starting population.

        Args:
            config: Evolution configuration
            fitness_fn: Objective; higher is better
            population: Optional starting genomes (spawned randomly if omitted)
        """
        self.config = config
        self.fitness_fn = fitness_fn
        self.rng = np.random.default_rng(config.seed)
        self.generation = 0
        self.history = EvolutionHistory()

        if population is None:
            self.population = self._spawn_population()
        else:
            if len(population) != config.population_size:
                raise ValueError(
                    f"Expected {config.population_size} genomes, got {len(population)}"
                )
            self.population = list(population)

        self.last_ranking: List[FitnessPair] = self.rank()

    def _spawn_population(self) -> List[Genome]:
        return [
            create_random_genome(self.config.architecture, self.config.activation, self.rng)
            for _ in range(self.config.population_size)
        ]

    def rank(self) -> List[FitnessPair]:
        """Re-evaluate every genome and store the ranking."""
        self.last_ranking = rank_population(self.population, self.fitness_fn)
        return self.last_ranking

    def step(self) -> GenerationStats:
        """Execute one generation of evolution."""
        config = self.config
        ranked = self.rank()
        pool_size = len(ranked)

        # 1. Partition the worst slots into crossover and copy groups
        dead_count = floor_fraction(pool_size, 1.0 - config.survival_rate)
        dead = ranked[:dead_count]
        crossover_count = floor_fraction(dead_count, config.effective_crossover_rate)
        crossover_slots = dead[:crossover_count]
        copy_slots = dead[crossover_count:]

        # Parents and clone sources come from the population as ranked
        snapshot = list(self.population)
        children: Dict[int, Genome] = {}

        # 2. Crossover
        for strategy, slots in allocate_slots(config.strategies, crossover_slots):
            if not slots:
                continue
            for family in create_offspring(strategy, ranked, slots, self.rng):
                child = Genome.recombine(
                    snapshot[family.parent_a_index],
                    snapshot[family.parent_b_index],
                    family.parent_a_fitness,
                    family.parent_b_fitness,
                    self.rng,
                )
                child.fitness = float(self.fitness_fn(child))
                children[family.child_index] = child
        n_crossover = len(children)

        # 3. Elite copies, cycling from the best slot downward
        window = elite_window_size(pool_size, config.elite_rate)
        for k, slot in enumerate(copy_slots):
            source = ranked[pool_size - 1 - (k % window)]
            clone = snapshot[source.index].copy()
            clone.mutate(config.mutation_rate, self.rng)
            children[slot.index] = clone
        n_copied = len(copy_slots)

        for index, child in children.items():
            self.population[index] = child

        # 4. Mutate everyone
        for genome in self.population:
            genome.mutate(config.mutation_rate, self.rng)

        self.generation += 1
        stats = self.history.record_generation(
            generation=self.generation,
            population=snapshot,
            crossover_children=n_crossover,
            copied_children=n_copied,
        )
        logger.debug(
            "Generation %d: best=%.4f mean=%.4f crossover=%d copied=%d unassigned=%d",
            self.generation,
            stats.best_fitness,
            stats.mean_fitness,
            n_crossover,
            n_copied,
            len(crossover_slots) - n_crossover,
        )
        return stats

    def train(
        self,
        generations: int,
        progress_callback: Optional[Callable[[int, int, Dict], None]] = None,
        early_stop_patience: Optional[int] = None,
        min_improvement: float = 0.001,
    ) -> EvolutionResult:
        """
        Run several generations.

        Args:
            generations: Maximum number of generations to run
            progress_callback: Optional callback(done, total, stats)
            early_stop_patience: Stop after this many generations without
                improvement (disabled when None)
            min_improvement: Minimum improvement to count as progress

        Returns:
            EvolutionResult for this call
        """
        start_time = time.time()
        early_stopped = False
        logger.info("Training for %d generations (population %d)", generations, len(self.population))

        for done in range(1, generations + 1):
            stats = self.step()

            if progress_callback:
                progress_callback(done, generations, stats.to_dict())

            if early_stop_patience is not None and self.history.should_early_stop(
                patience=early_stop_patience,
                min_improvement=min_improvement,
            ):
                early_stopped = True
                logger.info("Stopping early at generation %d", self.generation)
                break

        best = self.extract_best()
        runtime = time.time() - start_time
        logger.info("Finished at generation %d, best fitness %s", self.generation, best.fitness)

        return EvolutionResult(
            generations_completed=self.generation,
            best_fitness=best.fitness,
            best_genome=best,
            history=self.history,
            runtime_seconds=runtime,
            early_stopped=early_stopped,
        )

    def extract_best(self) -> Genome:
        """Return a copy of the genome with the highest cached fitness."""
        best = self.population[0]
        for genome in self.population[1:]:
            if FitnessPair(_cached(genome), 0) > FitnessPair(_cached(best), 0):
                best = genome
        return best.copy()


def _cached(genome: Genome) -> float:
    return genome.fitness if genome.fitness is not None else float('nan')
