"""Pretty-print helpers for sudoku grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, List, Sequence

from ..core.constants import EMPTY, N, SUB, hole_target

if TYPE_CHECKING:
    from ..core.models import Puzzle


def cell_symbol(value: int) -> str:
    return "." if value == EMPTY else str(value)


def format_grid(grid: Sequence[Sequence[int]]) -> str:
    separator = "+".join(["-" * (2 * SUB + 1)] * (N // SUB))
    lines: List[str] = []
    for r in range(N):
        if r and r % SUB == 0:
            lines.append(separator)
        chunks = [
            " ".join(cell_symbol(grid[r][c]) for c in range(start, start + SUB))
            for start in range(0, N, SUB)
        ]
        lines.append(" " + " | ".join(chunks))
    return "\n".join(lines)


def pretty_print_grid(grid: Sequence[Sequence[int]], *, label: str | None = None, stream=None) -> None:
    """Print the grid in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_grid(grid), file=stream)


def print_puzzle_stats(puzzle: Puzzle, *, show_solution: bool = False, stream=None) -> None:
    """Print the puzzle grid plus hole and clue distribution stats."""

    stream = stream or sys.stdout
    print(format_grid(puzzle.puzzle), file=stream)

    target = hole_target(puzzle.difficulty)
    givens = N * N - puzzle.holes
    print(file=stream)
    print("--- Puzzle ---", file=stream)
    print(f"  Difficulty:    {puzzle.difficulty.value}", file=stream)
    if puzzle.fell_back:
        print(f"  Requested:     {puzzle.requested_difficulty.value} (fell back)", file=stream)
    print(f"  Holes:         {puzzle.holes}/{target} target", file=stream)
    print(f"  Givens:        {givens}", file=stream)

    per_digit = Counter(value for row in puzzle.puzzle for value in row if value != EMPTY)
    dist_parts = [f"{digit}:{per_digit.get(digit, 0)}" for digit in range(1, N + 1)]
    print(f"  Given digits:  {' '.join(dist_parts)}", file=stream)
    per_row = [sum(1 for value in row if value != EMPTY) for row in puzzle.puzzle]
    print(f"  Givens/row:    {' '.join(str(count) for count in per_row)}", file=stream)

    if show_solution:
        print(file=stream)
        print("--- Solution ---", file=stream)
        print(format_grid(puzzle.solution), file=stream)
