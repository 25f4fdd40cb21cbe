"""
Tests for evolution history and plotting.

Run with: python -m pytest tests/test_history.py -v
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from evoflow.genome import Genome, Layer
from evoflow.history import EvolutionHistory, GenerationStats


def scored_population(scores):
    population = []
    for score in scores:
        genome = Genome(layers=[Layer(weights=np.zeros((1, 2)))])
        genome.fitness = score
        population.append(genome)
    return population


class TestEvolutionHistory:
    """Tests for EvolutionHistory."""

    def test_record_generation(self):
        history = EvolutionHistory()

        stats = history.record_generation(
            generation=1,
            population=scored_population([1.0, 3.0, 2.0]),
            crossover_children=2,
            copied_children=1,
        )

        assert isinstance(stats, GenerationStats)
        assert stats.best_fitness == 3.0
        assert stats.mean_fitness == pytest.approx(2.0)
        assert stats.min_fitness == 1.0
        assert stats.population_size == 3
        assert stats.crossover_children == 2
        assert stats.copied_children == 1
        assert history.fitness_trajectory == [3.0]
        assert history.mean_trajectory == [pytest.approx(2.0)]

    def test_unscored_genomes_ignored(self):
        history = EvolutionHistory()

        stats = history.record_generation(1, scored_population([None, float('nan'), 4.0]))

        assert stats.best_fitness == 4.0
        assert stats.min_fitness == 4.0
        assert stats.population_size == 3

    def test_to_dict(self):
        history = EvolutionHistory()
        history.record_generation(1, scored_population([1.0]))
        history.record_generation(2, scored_population([2.0]))

        data = history.to_dict()

        assert data['fitness_trajectory'] == [1.0, 2.0]
        assert [g['generation'] for g in data['generations']] == [1, 2]

    def test_improvement_rate(self):
        history = EvolutionHistory()
        assert history.get_improvement_rate(window=2) == float('inf')

        for generation, best in enumerate([1.0, 2.0, 4.0], start=1):
            history.record_generation(generation, scored_population([best]))

        assert history.get_improvement_rate(window=2) == 2.0

    def test_should_early_stop(self):
        history = EvolutionHistory()
        for generation, best in enumerate([1.0, 2.0, 2.0], start=1):
            history.record_generation(generation, scored_population([best]))

        assert not history.should_early_stop(patience=3)
        assert not history.should_early_stop(patience=2)
        assert history.should_early_stop(patience=1)


class TestPlots:
    """Tests for fitness plots."""

    def test_plot_saved(self, tmp_path):
        from evoflow.plots import plot_fitness_history

        history = EvolutionHistory()
        for generation, best in enumerate([0.0, 2.0, 4.0], start=1):
            history.record_generation(generation, scored_population([best, best - 2.0]))
        output = tmp_path / 'fitness.png'

        fig = plot_fitness_history(history, output_path=output)

        assert output.exists()
        assert output.stat().st_size > 0
        assert fig is not None

    def test_plot_empty_history(self):
        from evoflow.plots import plot_fitness_history

        with pytest.raises(ValueError):
            plot_fitness_history(EvolutionHistory())


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
