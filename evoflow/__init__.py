"""
evoflow - neuroevolution of small feed-forward networks.

Evolves a population of fixed-topology networks toward a caller-supplied
fitness objective using a genetic algorithm: ranking, survival, weighted
crossover and mutation. No gradients are involved.

Key components:
- Genome: Fixed-topology network with evaluate / mutate / recombine
- rank_population: Fitness ranking, worst first
- Selection strategies: Tournament, PrimeParent (elite window), Roulette
- GenerationScheduler: One generation = rank, replace, mutate
- TrainerBuilder: Validated construction of a scheduler

Example usage:
    from evoflow import TrainerBuilder, PrimeParentStrategy, xor_fitness

    scheduler = (
        TrainerBuilder()
        .set_population_size(50)
        .set_architecture([2, 2, 1])
        .set_fitness_function(xor_fitness)
        .set_survival_rate(0.6)
        .set_crossover_rate(1.0)
        .set_mutation_rate(0.05)
        .add_parent_selection_strategy(PrimeParentStrategy(weight=1, rate=0.2))
        .build()
    )
    result = scheduler.train(200)

    print(f"Best fitness: {result.best_fitness}")
"""

from .activations import ACTIVATIONS, get_activation
from .genome import Genome, Layer, create_random_genome
from .fitness import (
    FitnessPair,
    rank_population,
    xor_fitness,
    xor_truth_table,
    solves_xor,
)
from .selection import (
    CrossoverFamily,
    TournamentStrategy,
    PrimeParentStrategy,
    RouletteStrategy,
    create_offspring,
    allocate_slots,
)
from .history import EvolutionHistory, GenerationStats
from .engine import GenerationScheduler, EvolutionConfig, EvolutionResult
from .builder import TrainerBuilder, TrainerBuildError, VariableNotSet, ValidationError

__all__ = [
    # Core classes
    'Genome',
    'Layer',
    'GenerationScheduler',
    'EvolutionConfig',
    'EvolutionResult',
    'EvolutionHistory',
    'GenerationStats',
    # Genome helpers
    'create_random_genome',
    'ACTIVATIONS',
    'get_activation',
    # Fitness
    'FitnessPair',
    'rank_population',
    'xor_fitness',
    'xor_truth_table',
    'solves_xor',
    # Selection
    'CrossoverFamily',
    'TournamentStrategy',
    'PrimeParentStrategy',
    'RouletteStrategy',
    'create_offspring',
    'allocate_slots',
    # Builder
    'TrainerBuilder',
    'TrainerBuildError',
    'VariableNotSet',
    'ValidationError',
]
