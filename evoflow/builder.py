"""
Builder for GenerationScheduler.

Collects parameters one at a time, validates them together and returns a
scheduler whose population is already spawned and evaluated. Problems are
reported as TrainerBuildError subclasses:

- VariableNotSet: a required field was never given
- ValidationError: a value is out of range

Example:
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
"""

import logging
from typing import List, Optional, Sequence

from .activations import DEFAULT_ACTIVATION
from .engine import EvolutionConfig, GenerationScheduler
from .fitness import FitnessFunction
from .selection import StrategyConfig, PrimeParentStrategy, elite_window_size

logger = logging.getLogger(__name__)


class TrainerBuildError(ValueError):
    """Base class for builder failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class VariableNotSet(TrainerBuildError):
    """A required builder field was not set."""

    def __init__(self, field_name: str):
        super().__init__(f"Variable not set. {field_name} not set")
        self.field_name = field_name


class ValidationError(TrainerBuildError):
    """A builder field holds an invalid value."""

    def __init__(self, reason: str):
        super().__init__(f"Validation error. {reason}")
        self.reason = reason


class TrainerBuilder:
    """Fluent builder for a validated GenerationScheduler."""

    def __init__(self):
        self.parent_strategies: List[StrategyConfig] = []
        self.population_size: Optional[int] = None
        self.architecture: Optional[List[int]] = None
        self.fitness_function: Optional[FitnessFunction] = None
        self.survival_rate: Optional[float] = None
        self.crossover_rate: Optional[float] = None
        self.mutation_rate: Optional[float] = None
        self.elite_rate: Optional[float] = None
        self.activation: str = DEFAULT_ACTIVATION
        self.seed: Optional[int] = None

    def set_population_size(self, size: int) -> 'TrainerBuilder':
        self.population_size = size
        return self

    def set_architecture(self, architecture: Sequence[int]) -> 'TrainerBuilder':
        self.architecture = list(architecture)
        return self

    def set_fitness_function(self, fitness_fn: FitnessFunction) -> 'TrainerBuilder':
        self.fitness_function = fitness_fn
        return self

    def set_survival_rate(self, rate: float) -> 'TrainerBuilder':
        self.survival_rate = rate
        return self

    def set_crossover_rate(self, rate: float) -> 'TrainerBuilder':
        self.crossover_rate = rate
        return self

    def set_mutation_rate(self, rate: float) -> 'TrainerBuilder':
        self.mutation_rate = rate
        return self

    def set_elite_rate(self, rate: float) -> 'TrainerBuilder':
        self.elite_rate = rate
        return self

    def set_activation(self, name: str) -> 'TrainerBuilder':
        self.activation = name
        return self

    def set_seed(self, seed: Optional[int]) -> 'TrainerBuilder':
        self.seed = seed
        return self

    def add_parent_selection_strategy(self, strategy: StrategyConfig) -> 'TrainerBuilder':
        """Add a strategy; one of the same kind already present is replaced in place."""
        for i, existing in enumerate(self.parent_strategies):
            if type(existing) is type(strategy):
                self.parent_strategies[i] = strategy
                return self
        self.parent_strategies.append(strategy)
        return self

    def build_config(self) -> EvolutionConfig:
        """Validate the collected fields and return the configuration."""
        if self.population_size is None:
            raise VariableNotSet('population_size')
        if self.architecture is None:
            raise VariableNotSet('architecture')
        if self.fitness_function is None:
            raise VariableNotSet('fitness_function')

        crossover_rate = self.crossover_rate if self.crossover_rate is not None else 0.0
        if not self.parent_strategies and crossover_rate != 0.0:
            logger.debug("No parent selection strategy configured, crossover disabled")
            crossover_rate = 0.0

        try:
            config = EvolutionConfig(
                population_size=self.population_size,
                architecture=self.architecture,
                survival_rate=self.survival_rate if self.survival_rate is not None else 0.0,
                crossover_rate=crossover_rate,
                mutation_rate=self.mutation_rate if self.mutation_rate is not None else 0.0,
                elite_rate=self.elite_rate if self.elite_rate is not None else 0.1,
                activation=self.activation,
                strategies=self.parent_strategies,
                seed=self.seed,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

        for strategy in config.strategies:
            if isinstance(strategy, PrimeParentStrategy) and \
                    elite_window_size(config.population_size, strategy.rate) < 2:
                logger.warning(
                    "Prime parent window holds a single genome (rate=%s); "
                    "both parents will be the best genome",
                    strategy.rate,
                )

        return config

    def build(self) -> GenerationScheduler:
        """Validate and construct a scheduler with an evaluated population."""
        config = self.build_config()
        return GenerationScheduler(config, self.fitness_function)
