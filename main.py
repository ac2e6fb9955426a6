"""CLI entrypoint for the sudoku puzzle generator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from sudoku.core.constants import Difficulty
from sudoku.core.exceptions import SudokuError
from sudoku.core.models import Puzzle
from sudoku.engine.generator import GeneratorConfig, PuzzleGenerator
from sudoku.engine.grid import parse_grid
from sudoku.engine.pool import PoolConfig, PuzzlePool
from sudoku.engine.puzzle_store import PuzzleStore
from sudoku.engine.validator import PuzzleValidator
from sudoku.utils.logger import configure_logging
from sudoku.utils.pretty import pretty_print_grid, print_puzzle_stats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate sudoku puzzles with a guaranteed unique solution",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
        help="Difficulty level (easy, medium, hard)",
    )
    parser.add_argument("--count", type=int, default=1, help="Number of puzzles to generate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=GeneratorConfig.max_attempts,
        help="Carving attempts before falling back to medium",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "text"],
        default="json",
        help="Output format",
    )
    parser.add_argument(
        "--show-solution",
        action="store_true",
        help="Include the solution grid in text output",
    )
    parser.add_argument(
        "--pool-dir",
        type=Path,
        metavar="DIR",
        help="Serve puzzles from a persisted pool in DIR and top it back up",
    )
    parser.add_argument(
        "--solve",
        type=str,
        metavar="GRID",
        help="Solve an 81-cell grid ('0' or '.' for blanks) instead of generating",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def _generate(args: argparse.Namespace) -> List[Puzzle]:
    if args.pool_dir is None:
        generator = PuzzleGenerator(GeneratorConfig(seed=args.seed, max_attempts=args.max_attempts))
        return [generator.generate(args.difficulty) for _ in range(args.count)]

    config = PoolConfig(seed=args.seed, generator=GeneratorConfig(max_attempts=args.max_attempts))
    puzzles: List[Puzzle] = []
    with PuzzlePool(config, store=PuzzleStore(args.pool_dir)) as pool:
        for _ in range(args.count):
            puzzle = pool.get(args.difficulty)
            if puzzle is None:
                puzzle = pool.generate_async(args.difficulty).result()
            puzzles.append(puzzle)
        pool.wait_until_idle(args.difficulty)
    return puzzles


def _solve(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    from sudoku.engine.counter import count_solutions
    from sudoku.engine.solver import solve_grid

    try:
        grid = parse_grid(args.solve)
    except SudokuError as exc:
        parser.error(str(exc))
    solved = solve_grid(grid)
    if solved is None:
        print("No solution", file=sys.stderr)
        sys.exit(1)
    payload = {
        "solution": solved,
        "unique": count_solutions(grid, limit=2) == 1,
    }
    if args.format == "text":
        pretty_print_grid(solved, label="Solution")
        print(f"Unique: {payload['unique']}")
    else:
        _emit(json.dumps(payload, indent=2), args.output)


def _emit(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
    else:
        print(text)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    if args.count < 1:
        parser.error("--count must be at least 1")
    if args.max_attempts < 1:
        parser.error("--max-attempts must be at least 1")

    if args.solve:
        _solve(args, parser)
        return

    puzzles = _generate(args)
    validator = PuzzleValidator()
    messages = [msg for puzzle in puzzles for msg in validator.validate(puzzle).messages]

    if args.format == "text":
        for index, puzzle in enumerate(puzzles):
            if index:
                print()
            print_puzzle_stats(puzzle, show_solution=args.show_solution)
        for message in messages:
            print(f"Validation: {message}")
        return

    payload: Dict[str, Any] = {
        "difficulty": args.difficulty,
        "seed": args.seed,
        "puzzles": [puzzle.to_jsonable() for puzzle in puzzles],
        "validation": messages,
    }
    _emit(json.dumps(payload, indent=2), args.output)


if __name__ == "__main__":  # pragma: no cover
    main()
