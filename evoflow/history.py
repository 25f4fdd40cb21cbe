"""
Per-generation statistics for evolution runs.

The scheduler records one GenerationStats after every step. The history
feeds progress callbacks, fitness plots and the early-stop check, and is
kept in memory only.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Dict, Any, Sequence, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .genome import Genome


@dataclass
class GenerationStats:
    """Fitness summary of the population a generation started from."""
    generation: int
    best_fitness: float
    mean_fitness: float
    min_fitness: float
    std_fitness: float
    population_size: int
    crossover_children: int
    copied_children: int
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """Best and mean fitness per generation, plus the full stats records."""

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.fitness_trajectory: List[float] = []
        self.mean_trajectory: List[float] = []

    def __len__(self) -> int:
        return len(self.generations)

    def record_generation(
        self,
        generation: int,
        population: Sequence['Genome'],
        crossover_children: int = 0,
        copied_children: int = 0,
    ) -> GenerationStats:
        """
        Summarise a population's cached fitness and append it.

        Genomes without a score, or scored NaN, are left out of the fitness
        statistics but still count toward population_size.

        Args:
            generation: Generation number the record belongs to
            population: Genomes as ranked for this generation
            crossover_children: Slots refilled by recombination
            copied_children: Slots refilled by elite copies

        Returns:
            The appended GenerationStats
        """
        scores = np.array(
            [g.fitness for g in population if g.fitness is not None],
            dtype=float,
        )
        scores = scores[~np.isnan(scores)]
        if scores.size == 0:
            scores = np.zeros(1)

        stats = GenerationStats(
            generation=generation,
            best_fitness=float(scores.max()),
            mean_fitness=float(scores.mean()),
            min_fitness=float(scores.min()),
            std_fitness=float(scores.std()),
            population_size=len(population),
            crossover_children=crossover_children,
            copied_children=copied_children,
            timestamp=datetime.now().isoformat(),
        )

        self.generations.append(stats)
        self.fitness_trajectory.append(stats.best_fitness)
        self.mean_trajectory.append(stats.mean_fitness)
        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generations': [stats.to_dict() for stats in self.generations],
            'fitness_trajectory': list(self.fitness_trajectory),
            'mean_trajectory': list(self.mean_trajectory),
        }

    def get_improvement_rate(self, window: int = 5) -> float:
        """
        Gain of the best fitness over the last `window` generations against
        the `window` generations before the latest one.

        Returns inf until window + 1 generations are recorded.
        """
        if len(self) <= window:
            return float('inf')
        latest = self.fitness_trajectory[-window:]
        previous = self.fitness_trajectory[-window - 1:-1]
        return max(latest) - max(previous)

    def should_early_stop(self, patience: int = 10, min_improvement: float = 0.001) -> bool:
        """
        True when the last `patience` generations failed to beat the earlier
        best fitness by at least `min_improvement`.
        """
        if len(self) <= patience:
            return False
        split = len(self) - patience
        earlier = max(self.fitness_trajectory[:split])
        recent = max(self.fitness_trajectory[split:])
        return recent - earlier < min_improvement
