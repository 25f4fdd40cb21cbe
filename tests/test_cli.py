"""
Tests for the interactive command loop.

Run with: python -m pytest tests/test_cli.py -v
"""

import io
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from evoflow.__main__ import CommandLoop, build_scheduler, main, parse_args
from evoflow.builder import ValidationError


@pytest.fixture
def loop():
    scheduler = build_scheduler(parse_args(['--population', '10', '--seed', '3']))
    return CommandLoop(scheduler, out=io.StringIO(), err=io.StringIO())


class TestParseArgs:
    """Tests for command-line options."""

    def test_defaults(self):
        args = parse_args([])

        assert args.population == 1000
        assert args.architecture == [2, 2, 1]
        assert args.survival_rate == 0.6
        assert args.crossover_rate == 1.0
        assert args.mutation_rate == 0.05
        assert args.tournament_rounds is None

    def test_non_xor_architecture_rejected(self):
        with pytest.raises(ValidationError):
            build_scheduler(parse_args(['--population', '10', '--architecture', '3', '1']))

    def test_tournament_added(self):
        scheduler = build_scheduler(
            parse_args(['--population', '10', '--tournament-rounds', '4'])
        )

        kinds = [type(s).__name__ for s in scheduler.config.strategies]
        assert kinds == ['PrimeParentStrategy', 'TournamentStrategy']


class TestCommands:
    """Tests for individual commands."""

    def test_train(self, loop):
        assert loop.handle('train 3')
        assert loop.handle('t 2')

        assert loop.scheduler.generation == 5
        assert loop.out.getvalue().splitlines() == [
            "Trained to generation 3",
            "Trained to generation 5",
        ]

    def test_train_bad_count(self, loop):
        assert loop.handle('train abc')
        assert loop.handle('train -2')

        assert loop.scheduler.generation == 0
        assert loop.err.getvalue().splitlines() == [
            "Could not parse 'abc' into a non-negative integer",
            "Could not parse '-2' into a non-negative integer",
        ]

    def test_train_missing_count(self, loop):
        assert loop.handle('train')
        assert "command not supplied with number of generations to train" in loop.err.getvalue()

    def test_display_one(self, loop):
        loop.handle('display 0')

        output = loop.out.getvalue()
        assert output.startswith("fitness: ")
        assert output.count("layer\n") == 2

    def test_display_all(self, loop):
        loop.handle('d')
        assert loop.out.getvalue().count("fitness: ") == 10

    def test_display_out_of_range(self, loop):
        loop.handle('display 10')

        assert loop.out.getvalue() == ''
        assert "No genome at index 10" in loop.err.getvalue()

    def test_extract(self, loop):
        loop.handle('ex')

        lines = loop.out.getvalue().splitlines()
        assert lines[0] == "Extracting Best. Result"
        assert len(lines) == 5
        assert lines[1].startswith("0, 0 -> ")
        assert lines[1].endswith(" : 0")
        assert lines[2].startswith("0, 1 -> ")
        assert lines[2].endswith(" : 1")

    def test_exit(self, loop):
        assert not loop.handle('exit')
        assert not loop.handle('e')
        assert loop.out.getvalue().count("Exiting...") == 2

    def test_unknown_command(self, loop):
        assert loop.handle('jump 3')
        assert "Unknown Input: ['jump', '3']" in loop.err.getvalue()

    def test_blank_line(self, loop):
        assert loop.handle('   \n')
        assert loop.out.getvalue() == ''
        assert loop.err.getvalue() == ''

    def test_run_stops_at_exit(self, loop):
        loop.run(io.StringIO("t 1\ne\nt 5\n"))

        assert loop.scheduler.generation == 1
        assert loop.out.getvalue().splitlines()[-1] == "Exiting..."


class TestMain:
    """Tests for the main entry point."""

    def test_session(self, capsys):
        status = main(['--population', '10', '--seed', '1'], stdin=io.StringIO("t 2\nex\nexit\n"))

        out = capsys.readouterr().out
        assert status == 0
        assert "Trained to generation 2" in out
        assert "Extracting Best. Result" in out
        assert out.rstrip().endswith("Exiting...")

    def test_invalid_configuration(self, capsys):
        status = main(['--population', '10', '--survival-rate', '1.5'], stdin=io.StringIO(""))

        assert status == 2
        assert "Validation error." in capsys.readouterr().err


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
