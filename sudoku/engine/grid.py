"""Grid representation and helper utilities."""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, MutableSequence, Optional, Sequence, Tuple, TypeVar

from ..core.constants import DIGITS, EMPTY, N, SUB
from ..core.exceptions import InvalidGridError
from ..core.models import Grid


T = TypeVar("T")


# ----------------------------------------------------------------------
# Randomness helpers
# ----------------------------------------------------------------------
def shuffle_in_place(items: MutableSequence[T], rng: random.Random) -> MutableSequence[T]:
    """Fisher-Yates shuffle: swap each index with a uniform pick at or below it."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def shuffled(items: Iterable[T], rng: random.Random) -> List[T]:
    return list(shuffle_in_place(list(items), rng))


# ----------------------------------------------------------------------
# Complete grid generation
# ----------------------------------------------------------------------
def base_pattern(row: int, col: int) -> int:
    """Latin-square pattern that is a valid 9x9 sudoku for 0-based digits."""
    return (SUB * (row % SUB) + row // SUB + col) % N


def band_permutation(rng: random.Random) -> List[int]:
    """Shuffle the bands, then the lines inside each band, into a 0..8 ordering."""
    order: List[int] = []
    for band in shuffled(range(SUB), rng):
        order.extend(band * SUB + line for line in shuffled(range(SUB), rng))
    return order


def generate_complete_grid(rng: Optional[random.Random] = None) -> Grid:
    """Return a random, fully filled, rule-valid grid.

    Band, in-band line and digit-label permutations all preserve validity of
    :func:`base_pattern`, so this always succeeds in a single pass.
    """

    rng = rng or random.Random()
    rows = band_permutation(rng)
    cols = band_permutation(rng)
    labels = shuffled(DIGITS, rng)
    return [[labels[base_pattern(rows[r], cols[c])] for c in range(N)] for r in range(N)]


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------
def box_origin(row: int, col: int) -> Tuple[int, int]:
    return SUB * (row // SUB), SUB * (col // SUB)


def candidates(grid: Sequence[Sequence[int]], row: int, col: int) -> List[int]:
    """Digits not yet used in the row, column or block of ``(row, col)``."""
    used = set(grid[row])
    used.update(grid[r][col] for r in range(N))
    br, bc = box_origin(row, col)
    for r in range(br, br + SUB):
        used.update(grid[r][bc:bc + SUB])
    return [digit for digit in DIGITS if digit not in used]


def is_complete_valid(grid: Sequence[Sequence[int]]) -> bool:
    """True when every row, column and block is a permutation of 1..9."""
    target = set(DIGITS)
    for i in range(N):
        if set(grid[i]) != target:
            return False
        if {grid[r][i] for r in range(N)} != target:
            return False
    for br in range(0, N, SUB):
        for bc in range(0, N, SUB):
            block = {grid[r][c] for r in range(br, br + SUB) for c in range(bc, bc + SUB)}
            if block != target:
                return False
    return True


def units() -> List[List[Tuple[int, int]]]:
    """All 27 rows, columns and blocks as lists of cell coordinates."""
    result: List[List[Tuple[int, int]]] = []
    for i in range(N):
        result.append([(i, c) for c in range(N)])
        result.append([(r, i) for r in range(N)])
    for br in range(0, N, SUB):
        for bc in range(0, N, SUB):
            result.append([(r, c) for r in range(br, br + SUB) for c in range(bc, bc + SUB)])
    return result


def find_conflicts(grid: Sequence[Sequence[int]]) -> List[Tuple[int, int]]:
    """Cells whose non-empty value repeats inside a row, column or block."""
    conflicts = set()
    for unit in units():
        seen: Dict[int, Tuple[int, int]] = {}
        for r, c in unit:
            value = grid[r][c]
            if value == EMPTY:
                continue
            if value in seen:
                conflicts.add((r, c))
                conflicts.add(seen[value])
            else:
                seen[value] = (r, c)
    return sorted(conflicts)


def symmetric_partner(row: int, col: int) -> Tuple[int, int]:
    return N - 1 - row, N - 1 - col


# ----------------------------------------------------------------------
# Construction and conversion
# ----------------------------------------------------------------------
def copy_grid(grid: Sequence[Sequence[int]]) -> Grid:
    return [list(row) for row in grid]


def ensure_grid(grid: Sequence[Sequence[int]]) -> Grid:
    """Validate shape and value range, returning a fresh copy."""
    if len(grid) != N or any(len(row) != N for row in grid):
        raise InvalidGridError(f"Grid must be {N}x{N}")
    copied = copy_grid(grid)
    for r, row in enumerate(copied):
        for c, value in enumerate(row):
            if not isinstance(value, int) or isinstance(value, bool) or not EMPTY <= value <= N:
                raise InvalidGridError(f"Invalid value {value!r} at ({r},{c})")
    return copied


def parse_grid(text: str) -> Grid:
    """Parse 81 cells from text; ``0`` or ``.`` mark blanks, whitespace and ``|-+`` are ignored."""
    cells: List[int] = []
    for char in text:
        if char.isspace() or char in "|-+":
            continue
        if char == ".":
            cells.append(EMPTY)
        elif char in "0123456789":
            cells.append(int(char))
        else:
            raise InvalidGridError(f"Unexpected character {char!r} in grid text")
    if len(cells) != N * N:
        raise InvalidGridError(f"Expected {N * N} cells, got {len(cells)}")
    return [cells[r * N:(r + 1) * N] for r in range(N)]


def grid_to_string(grid: Sequence[Sequence[int]]) -> str:
    return "".join(str(value) for row in grid for value in row)
