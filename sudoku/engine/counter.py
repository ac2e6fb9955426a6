"""Solution counter used as the uniqueness oracle during carving.

Backtracking with the minimum-remaining-values heuristic: at every node the
empty cell with the fewest candidates is branched on. The search stops as
soon as ``limit`` completions have been seen, so with the default limit of 2
the count is only meaningful as "none", "unique" or "ambiguous".

Row, column and block usage is tracked as 9-bit masks so candidate sets are a
couple of bitwise operations instead of a unit scan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

from ..core.constants import DIGITS, EMPTY, N, SOLUTION_LIMIT, SUB


class SearchStatus(Enum):
    CONTINUE = "continue"
    LIMIT_REACHED = "limit_reached"


FULL_MASK = (1 << N) - 1
_DIGITS_FOR_MASK: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(digit for digit in DIGITS if mask & (1 << (digit - 1))) for mask in range(FULL_MASK + 1)
)


def _box(row: int, col: int) -> int:
    return SUB * (row // SUB) + col // SUB


@dataclass
class _SearchState:
    limit: int
    rows: List[int] = field(default_factory=lambda: [0] * N)
    cols: List[int] = field(default_factory=lambda: [0] * N)
    boxes: List[int] = field(default_factory=lambda: [0] * N)
    empties: List[Tuple[int, int, int]] = field(default_factory=list)
    count: int = 0

    def place(self, row: int, col: int, box: int, bit: int) -> None:
        self.rows[row] |= bit
        self.cols[col] |= bit
        self.boxes[box] |= bit

    def unplace(self, row: int, col: int, box: int, bit: int) -> None:
        self.rows[row] &= ~bit
        self.cols[col] &= ~bit
        self.boxes[box] &= ~bit

    def free(self, row: int, col: int, box: int) -> int:
        return FULL_MASK & ~(self.rows[row] | self.cols[col] | self.boxes[box])


def _search(state: _SearchState, depth: int) -> SearchStatus:
    empties = state.empties
    if depth == len(empties):
        state.count += 1
        return SearchStatus.LIMIT_REACHED if state.count >= state.limit else SearchStatus.CONTINUE

    # MRV over the still-open cells empties[depth:]; first found wins ties.
    best_index = depth
    best_options: Tuple[int, ...] = ()
    best_size = N + 1
    for index in range(depth, len(empties)):
        row, col, box = empties[index]
        options = _DIGITS_FOR_MASK[state.free(row, col, box)]
        size = len(options)
        if size == 0:
            return SearchStatus.CONTINUE
        if size < best_size:
            best_index, best_options, best_size = index, options, size
            if size == 1:
                break

    empties[depth], empties[best_index] = empties[best_index], empties[depth]
    row, col, box = empties[depth]
    status = SearchStatus.CONTINUE
    for digit in best_options:
        bit = 1 << (digit - 1)
        state.place(row, col, box, bit)
        status = _search(state, depth + 1)
        state.unplace(row, col, box, bit)
        if status is SearchStatus.LIMIT_REACHED:
            break
    empties[depth], empties[best_index] = empties[best_index], empties[depth]
    return status


def count_solutions(grid: Sequence[Sequence[int]], limit: int = SOLUTION_LIMIT) -> int:
    """Return ``min(number of completions, limit)`` for a partially filled grid.

    Givens that already repeat inside a unit admit no completion and count as
    zero. The input grid is never modified.
    """

    if limit < 1:
        raise ValueError("limit must be at least 1")
    state = _SearchState(limit=limit)
    for r in range(N):
        for c in range(N):
            value = grid[r][c]
            box = _box(r, c)
            if value == EMPTY:
                state.empties.append((r, c, box))
                continue
            bit = 1 << (value - 1)
            if (state.rows[r] | state.cols[c] | state.boxes[box]) & bit:
                return 0
            state.place(r, c, box, bit)
    _search(state, 0)
    return state.count


def has_unique_solution(grid: Sequence[Sequence[int]]) -> bool:
    return count_solutions(grid, limit=SOLUTION_LIMIT) == 1
