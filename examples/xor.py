#!/usr/bin/env python3
"""
XOR training run.

Evolves a [2, 2, 1] network until its rounded outputs reproduce XOR, then
prints the truth table and optionally saves a fitness plot.

Usage:
    python examples/xor.py [options]

Options:
    --population N      Population size (default: 50)
    --generations N     Number of generations (default: 200)
    --seed N            Random seed for reproducibility
    --plot PATH         Save a fitness progression plot to PATH
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from evoflow.builder import TrainerBuilder
from evoflow.fitness import xor_fitness, xor_truth_table, solves_xor
from evoflow.selection import PrimeParentStrategy


def parse_args():
    parser = argparse.ArgumentParser(
        description='Evolve a network that computes XOR'
    )
    parser.add_argument(
        '--population', type=int, default=50,
        help='Population size (default: 50)'
    )
    parser.add_argument(
        '--generations', type=int, default=200,
        help='Number of generations (default: 200)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--plot', type=str, default=None,
        help='Path for a fitness progression PNG'
    )
    return parser.parse_args()


def progress_callback(gen: int, total: int, stats: dict):
    """Print progress during evolution."""
    pct = 100 * gen / total
    print(
        f"\r   Gen {gen:4d}/{total} ({pct:5.1f}%) | "
        f"Best fitness: {stats['best_fitness']:+.1f} | "
        f"Mean fitness: {stats['mean_fitness']:+.3f}",
        end='', flush=True
    )


def main():
    args = parse_args()

    scheduler = (
        TrainerBuilder()
        .set_population_size(args.population)
        .set_architecture([2, 2, 1])
        .set_fitness_function(xor_fitness)
        .set_survival_rate(0.6)
        .set_crossover_rate(1.0)
        .set_mutation_rate(0.05)
        .set_seed(args.seed)
        .add_parent_selection_strategy(PrimeParentStrategy(weight=1, rate=0.2))
        .build()
    )

    print("=" * 60)
    print("   XOR neuroevolution")
    print("=" * 60)

    result = scheduler.train(args.generations, progress_callback=progress_callback)
    print()

    scheduler.rank()
    best = scheduler.extract_best()

    print(f"\n{result.summary()}")
    print(f"\nSolved: {solves_xor(best)}")
    for (a, b), output, expected in xor_truth_table(best):
        print(f"   {a:g}, {b:g} -> {output:+.4f} (expected {expected:g})")

    if args.plot:
        from evoflow.plots import plot_fitness_history
        plot_fitness_history(result.history, args.plot, title='XOR Evolution')
        print(f"\nSaved fitness plot: {args.plot}")


if __name__ == '__main__':
    main()
