"""
Interactive XOR trainer.

Usage:
    python -m evoflow [options]

Commands (one per line on stdin):
    train <n>     | t <n>    Run n generations
    display [i]   | d [i]    Print the whole population or genome i
    extract       | ex       Print the best genome's XOR truth table
    exit          | e        Quit
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .builder import TrainerBuilder, TrainerBuildError, ValidationError
from .engine import GenerationScheduler
from .fitness import xor_fitness, xor_truth_table
from .selection import PrimeParentStrategy, TournamentStrategy


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog='python -m evoflow',
        description='Evolve a network that computes XOR',
    )
    parser.add_argument(
        '--population', type=int, default=1000,
        help='Population size (default: 1000)'
    )
    parser.add_argument(
        '--architecture', type=int, nargs='+', default=[2, 2, 1],
        help='Layer widths including input (default: 2 2 1)'
    )
    parser.add_argument(
        '--survival-rate', type=float, default=0.6,
        help='Fraction of the population kept each generation (default: 0.6)'
    )
    parser.add_argument(
        '--crossover-rate', type=float, default=1.0,
        help='Fraction of replaced slots filled by crossover (default: 1.0)'
    )
    parser.add_argument(
        '--mutation-rate', type=float, default=0.05,
        help='Per-weight mutation probability (default: 0.05)'
    )
    parser.add_argument(
        '--prime-rate', type=float, default=0.1,
        help='Elite window fraction for prime parent selection (default: 0.1)'
    )
    parser.add_argument(
        '--tournament-rounds', type=int, default=None,
        help='Also use tournament selection with this many rounds'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Log progress at INFO level'
    )
    return parser.parse_args(argv)


def build_scheduler(args) -> GenerationScheduler:
    if len(args.architecture) < 2 or args.architecture[0] != 2 or args.architecture[-1] != 1:
        raise ValidationError("XOR training needs an architecture with 2 inputs and 1 output")
    builder = (
        TrainerBuilder()
        .set_population_size(args.population)
        .set_architecture(args.architecture)
        .set_fitness_function(xor_fitness)
        .set_survival_rate(args.survival_rate)
        .set_crossover_rate(args.crossover_rate)
        .set_mutation_rate(args.mutation_rate)
        .set_seed(args.seed)
        .add_parent_selection_strategy(PrimeParentStrategy(weight=1, rate=args.prime_rate))
    )
    if args.tournament_rounds is not None:
        builder.add_parent_selection_strategy(
            TournamentStrategy(weight=1, rounds=args.tournament_rounds)
        )
    return builder.build()


class CommandLoop:
    """Reads commands and applies them to a scheduler."""

    def __init__(
        self,
        scheduler: GenerationScheduler,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.scheduler = scheduler
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def _print(self, *args):
        print(*args, file=self.out)

    def _error(self, message: str):
        print(message, file=self.err)

    def _parse_count(self, parts: List[str], missing: str) -> Optional[int]:
        if len(parts) < 2:
            self._error(missing)
            return None
        try:
            value = int(parts[1])
        except ValueError:
            self._error(f"Could not parse '{parts[1]}' into a non-negative integer")
            return None
        if value < 0:
            self._error(f"Could not parse '{parts[1]}' into a non-negative integer")
            return None
        return value

    def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the loop should stop."""
        parts = line.split()
        if not parts:
            return True
        command = parts[0]

        if command in ('exit', 'e'):
            self._print("Exiting...")
            return False

        if command in ('train', 't'):
            generations = self._parse_count(
                parts, "command not supplied with number of generations to train"
            )
            if generations is not None:
                self.scheduler.train(generations)
                self._print(f"Trained to generation {self.scheduler.generation}")

        elif command in ('display', 'd'):
            if len(parts) < 2:
                for genome in self.scheduler.population:
                    self._print(genome)
            else:
                index = self._parse_count(parts, '')
                if index is not None:
                    if index < len(self.scheduler.population):
                        self._print(self.scheduler.population[index])
                    else:
                        self._error(f"No genome at index {index}")

        elif command in ('extract', 'ex'):
            best = self.scheduler.extract_best()
            self._print("Extracting Best. Result")
            for (a, b), output, expected in xor_truth_table(best):
                self._print(f"{a:g}, {b:g} -> {output} : {expected:g}")

        else:
            self._error(f"Unknown Input: {parts}")

        return True

    def run(self, stream: TextIO) -> None:
        for line in stream:
            if not self.handle(line):
                break


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    try:
        scheduler = build_scheduler(args)
    except TrainerBuildError as e:
        print(e, file=sys.stderr)
        return 2

    CommandLoop(scheduler).run(stdin if stdin is not None else sys.stdin)
    return 0


if __name__ == '__main__':
    sys.exit(main())
