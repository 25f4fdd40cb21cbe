"""
Tests for TrainerBuilder.

Run with: python -m pytest tests/test_builder.py -v
"""

import logging
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from evoflow.builder import TrainerBuilder, TrainerBuildError, VariableNotSet, ValidationError
from evoflow.engine import GenerationScheduler
from evoflow.fitness import xor_fitness
from evoflow.selection import TournamentStrategy, PrimeParentStrategy, RouletteStrategy


@pytest.fixture
def builder():
    """Builder with every required field set."""
    return (
        TrainerBuilder()
        .set_population_size(20)
        .set_architecture([2, 2, 1])
        .set_fitness_function(xor_fitness)
        .set_seed(0)
    )


class TestRequiredFields:
    """Tests for missing required fields."""

    def test_missing_population_size(self):
        with pytest.raises(VariableNotSet) as exc_info:
            TrainerBuilder().set_architecture([2, 1]).set_fitness_function(xor_fitness).build()

        assert exc_info.value.field_name == 'population_size'
        assert str(exc_info.value) == "Variable not set. population_size not set"

    def test_missing_architecture(self):
        with pytest.raises(VariableNotSet) as exc_info:
            TrainerBuilder().set_population_size(10).set_fitness_function(xor_fitness).build()

        assert exc_info.value.field_name == 'architecture'

    def test_missing_fitness_function(self):
        with pytest.raises(VariableNotSet) as exc_info:
            TrainerBuilder().set_population_size(10).set_architecture([2, 1]).build()

        assert exc_info.value.field_name == 'fitness_function'

    def test_first_missing_field_reported(self):
        with pytest.raises(VariableNotSet) as exc_info:
            TrainerBuilder().build()

        assert exc_info.value.field_name == 'population_size'


class TestValidation:
    """Tests for out-of-range values."""

    @pytest.mark.parametrize('configure', [
        lambda b: b.set_population_size(1),
        lambda b: b.set_architecture([2, 0, 1]),
        lambda b: b.set_architecture([2]),
        lambda b: b.set_survival_rate(1.2),
        lambda b: b.set_crossover_rate(-0.5),
        lambda b: b.set_mutation_rate(3.0),
        lambda b: b.set_elite_rate(2.0),
        lambda b: b.set_activation('swish'),
        lambda b: b.add_parent_selection_strategy(TournamentStrategy(rounds=0)),
        lambda b: b.add_parent_selection_strategy(PrimeParentStrategy(rate=-0.1)),
    ])
    def test_invalid_values(self, builder, configure):
        configure(builder)
        with pytest.raises(ValidationError) as exc_info:
            builder.build()

        assert str(exc_info.value).startswith("Validation error. ")

    def test_errors_share_a_base(self):
        assert issubclass(VariableNotSet, TrainerBuildError)
        assert issubclass(ValidationError, TrainerBuildError)
        assert issubclass(TrainerBuildError, ValueError)


class TestBuild:
    """Tests for successful builds."""

    def test_build_returns_evaluated_scheduler(self, builder):
        scheduler = builder.build()

        assert isinstance(scheduler, GenerationScheduler)
        assert len(scheduler.population) == 20
        assert all(g.fitness is not None for g in scheduler.population)
        assert all(g.architecture == [2, 2, 1] for g in scheduler.population)

    def test_unset_rates_default(self, builder):
        config = builder.build_config()

        assert config.survival_rate == 0.0
        assert config.crossover_rate == 0.0
        assert config.mutation_rate == 0.0
        assert config.elite_rate == 0.1
        assert config.seed == 0

    def test_setters_are_fluent(self):
        builder = TrainerBuilder()
        assert builder.set_survival_rate(0.5) is builder
        assert builder.set_activation('relu') is builder
        assert builder.add_parent_selection_strategy(RouletteStrategy()) is builder

    def test_no_strategy_forces_zero_crossover(self, builder):
        config = builder.set_crossover_rate(0.8).build_config()

        assert config.crossover_rate == 0.0

    def test_strategy_kinds_are_unique(self, builder):
        """Adding a strategy of a kind already present replaces it in place."""
        builder.add_parent_selection_strategy(TournamentStrategy(weight=1, rounds=2))
        builder.add_parent_selection_strategy(RouletteStrategy(weight=1))
        builder.add_parent_selection_strategy(TournamentStrategy(weight=3, rounds=5))

        config = builder.set_crossover_rate(0.5).build_config()

        assert config.strategies == [TournamentStrategy(weight=3, rounds=5), RouletteStrategy(weight=1)]
        assert config.crossover_rate == 0.5

    def test_single_genome_prime_window_warns(self, builder, caplog):
        builder.add_parent_selection_strategy(PrimeParentStrategy(weight=1, rate=0.05))

        with caplog.at_level(logging.WARNING, logger='evoflow.builder'):
            builder.build_config()

        assert any('single genome' in record.message for record in caplog.records)

    def test_wide_prime_window_does_not_warn(self, builder, caplog):
        builder.add_parent_selection_strategy(PrimeParentStrategy(weight=1, rate=0.2))

        with caplog.at_level(logging.WARNING, logger='evoflow.builder'):
            builder.build_config()

        assert not caplog.records


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
