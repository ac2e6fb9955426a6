import unittest
from unittest.mock import patch

from sudoku.core.constants import N
from sudoku.engine import counter
from sudoku.engine.counter import count_solutions, has_unique_solution
from sudoku.engine.grid import base_pattern, candidates


CANONICAL = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]


def ambiguous_grid():
    """Base-pattern grid with a 6-cell cycle blanked: exactly two completions.

    Rows 0 and 1 hold {1, 4, 7} in columns 0, 3 and 6 in rotated order, so
    both rotations satisfy every row, column and block.
    """
    grid = [[base_pattern(r, c) + 1 for c in range(N)] for r in range(N)]
    for r in (0, 1):
        for c in (0, 3, 6):
            grid[r][c] = 0
    return grid


class CounterTests(unittest.TestCase):
    def test_single_gap_is_unique_and_forced(self) -> None:
        grid = [row[:] for row in CANONICAL]
        grid[4][4] = 0
        self.assertEqual(count_solutions(grid, limit=2), 1)
        self.assertEqual(candidates(grid, 4, 4), [5])
        self.assertTrue(has_unique_solution(grid))

    def test_complete_grid_counts_once(self) -> None:
        self.assertEqual(count_solutions(CANONICAL), 1)

    def test_two_solution_ambiguity_reaches_limit(self) -> None:
        grid = ambiguous_grid()
        self.assertEqual(count_solutions(grid, limit=2), 2)
        self.assertEqual(count_solutions(grid, limit=5), 2)
        self.assertFalse(has_unique_solution(grid))

    def test_limit_one_stops_at_first_solution(self) -> None:
        self.assertEqual(count_solutions(ambiguous_grid(), limit=1), 1)

    def test_empty_grid_stops_at_limit(self) -> None:
        empty = [[0] * N for _ in range(N)]
        self.assertEqual(count_solutions(empty, limit=2), 2)

    def test_search_stops_once_limit_is_reached(self) -> None:
        original = counter._search
        calls = []

        def tracking(state, depth):
            calls.append(depth)
            return original(state, depth)

        with patch.object(counter, "_search", side_effect=tracking):
            result = count_solutions(ambiguous_grid(), limit=2)
        self.assertEqual(result, 2)
        # two full paths of six levels plus the shared root; no third branch explored
        self.assertLessEqual(len(calls), 2 * 7)

    def test_dead_end_counts_zero(self) -> None:
        grid = [[0] * N for _ in range(N)]
        grid[0][1:] = [1, 2, 3, 4, 5, 6, 7, 8]
        grid[1][0] = 9  # (0,0) has no candidate left
        self.assertEqual(count_solutions(grid), 0)

    def test_conflicting_givens_count_zero(self) -> None:
        grid = [[0] * N for _ in range(N)]
        grid[0][0] = 3
        grid[8][0] = 3
        self.assertEqual(count_solutions(grid), 0)

    def test_input_grid_is_not_modified(self) -> None:
        grid = ambiguous_grid()
        before = [row[:] for row in grid]
        count_solutions(grid)
        self.assertEqual(grid, before)

    def test_invalid_limit(self) -> None:
        with self.assertRaises(ValueError):
            count_solutions(CANONICAL, limit=0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
