import random
import threading
import unittest
from unittest.mock import MagicMock, patch

from sudoku.core.constants import HOLE_TARGETS, N, Difficulty
from sudoku.core.exceptions import GenerationCancelled, GenerationError
from sudoku.engine.counter import count_solutions
from sudoku.engine.generator import GeneratorConfig, PuzzleGenerator, generate_puzzle
from sudoku.engine.grid import generate_complete_grid, is_complete_valid


class GeneratedPuzzleTests(unittest.TestCase):
    """Checks every generated puzzle against the puzzle invariants."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.puzzles = {
            difficulty: PuzzleGenerator(GeneratorConfig(seed=seed)).generate(difficulty)
            for seed, difficulty in enumerate(Difficulty, start=100)
        }

    def test_solution_is_complete_and_valid(self) -> None:
        for puzzle in self.puzzles.values():
            self.assertTrue(is_complete_valid(puzzle.solution))

    def test_mask_matches_givens(self) -> None:
        for puzzle in self.puzzles.values():
            for r in range(N):
                for c in range(N):
                    self.assertEqual(puzzle.mask[r][c], puzzle.puzzle[r][c] != 0)

    def test_givens_come_from_solution(self) -> None:
        for puzzle in self.puzzles.values():
            for r in range(N):
                for c in range(N):
                    if puzzle.puzzle[r][c]:
                        self.assertEqual(puzzle.puzzle[r][c], puzzle.solution[r][c])

    def test_unique_solution(self) -> None:
        for puzzle in self.puzzles.values():
            self.assertEqual(count_solutions(puzzle.puzzle, limit=2), 1)

    def test_hole_count_within_target(self) -> None:
        for difficulty, puzzle in self.puzzles.items():
            self.assertGreaterEqual(puzzle.holes, 0)
            self.assertLessEqual(puzzle.holes, HOLE_TARGETS[difficulty])

    def test_easy_reaches_its_target(self) -> None:
        # greedy carving runs well past 27 holes before uniqueness gets tight
        self.assertEqual(self.puzzles[Difficulty.EASY].holes, HOLE_TARGETS[Difficulty.EASY])

    def test_difficulty_recorded(self) -> None:
        for difficulty, puzzle in self.puzzles.items():
            self.assertEqual(puzzle.difficulty, difficulty)
            self.assertFalse(puzzle.fell_back)


class CarvingTests(unittest.TestCase):
    def test_carve_never_exceeds_odd_target(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=5))
        solution = generate_complete_grid(random.Random(5))
        carved = generator.carve(solution, 7)
        holes = sum(1 for row in carved for value in row if value == 0)
        self.assertLessEqual(holes, 7)
        self.assertEqual(count_solutions(carved), 1)

    def test_carve_does_not_touch_solution(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=9))
        solution = generate_complete_grid(random.Random(9))
        before = [row[:] for row in solution]
        generator.carve(solution, 30)
        self.assertEqual(solution, before)

    def test_symmetric_pairs_when_removal_is_free(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=3), counter=lambda grid, limit: 1)
        carved = generator.carve(generate_complete_grid(random.Random(3)), 40)
        holes = sum(1 for row in carved for value in row if value == 0)
        unmatched = [
            (r, c)
            for r in range(N)
            for c in range(N)
            if (carved[r][c] == 0) != (carved[N - 1 - r][N - 1 - c] == 0)
        ]
        self.assertEqual(holes, 40)
        # only the last hole may break a pair, when one slot of budget is left
        self.assertLessEqual(len(unmatched), 2)

    def test_rejected_removals_are_reverted(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=4), counter=lambda grid, limit: 2)
        solution = generate_complete_grid(random.Random(4))
        self.assertEqual(generator.carve(solution, 54), solution)


class SeededGenerationTests(unittest.TestCase):
    def test_same_seed_same_puzzle(self) -> None:
        first = PuzzleGenerator(GeneratorConfig(seed=77)).generate("medium")
        second = PuzzleGenerator(GeneratorConfig(seed=77)).generate("medium")
        self.assertEqual(first.puzzle, second.puzzle)
        self.assertEqual(first.solution, second.solution)

    def test_generate_puzzle_accepts_rng(self) -> None:
        first = generate_puzzle("easy", rng=random.Random(12))
        second = generate_puzzle("easy", rng=random.Random(12))
        self.assertEqual(first.puzzle, second.puzzle)

    def test_unknown_difficulty_uses_medium(self) -> None:
        puzzle = generate_puzzle("impossible", rng=random.Random(1))
        self.assertEqual(puzzle.difficulty, Difficulty.MEDIUM)
        self.assertLessEqual(puzzle.holes, HOLE_TARGETS[Difficulty.MEDIUM])


class FallbackTests(unittest.TestCase):
    def test_exhausted_hard_falls_back_to_medium(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(seed=21))
        real_attempt = generator._attempt
        targets = []

        def failing_hard(target):
            targets.append(target)
            if target == HOLE_TARGETS[Difficulty.HARD]:
                return None
            return real_attempt(target)

        with patch.object(generator, "_attempt", side_effect=failing_hard):
            puzzle = generator.generate(Difficulty.HARD)

        self.assertEqual(targets.count(HOLE_TARGETS[Difficulty.HARD]), 8)
        self.assertEqual(puzzle.difficulty, Difficulty.MEDIUM)
        self.assertEqual(puzzle.requested_difficulty, Difficulty.HARD)
        self.assertTrue(puzzle.fell_back)
        self.assertEqual(count_solutions(puzzle.puzzle), 1)

    def test_failing_counter_terminates_with_error(self) -> None:
        counter = MagicMock(return_value=2)
        generator = PuzzleGenerator(GeneratorConfig(seed=2), counter=counter)
        with self.assertRaises(GenerationError):
            generator.generate(Difficulty.HARD)
        self.assertTrue(counter.called)

    def test_fallback_depth_zero_raises_immediately(self) -> None:
        generator = PuzzleGenerator(
            GeneratorConfig(seed=2, max_attempts=2, max_fallback_depth=0),
            counter=lambda grid, limit: 0,
        )
        with patch.object(generator, "_attempt", wraps=generator._attempt) as attempt:
            with self.assertRaises(GenerationError):
                generator.generate(Difficulty.EASY)
        self.assertEqual(attempt.call_count, 2)

    def test_exhausted_medium_raises_without_retrying_medium(self) -> None:
        generator = PuzzleGenerator(
            GeneratorConfig(seed=2, max_attempts=2),
            counter=lambda grid, limit: 2,
        )
        with patch.object(generator, "_attempt", wraps=generator._attempt) as attempt:
            with self.assertLogs("sudoku.engine.generator", level="INFO") as logs, \
                    self.assertRaises(GenerationError):
                generator.generate(Difficulty.MEDIUM)
        self.assertEqual(attempt.call_count, 2)
        self.assertFalse(any("falling back" in line for line in logs.output))

    def test_exhausted_hard_runs_one_medium_batch(self) -> None:
        generator = PuzzleGenerator(
            GeneratorConfig(seed=2, max_attempts=2),
            counter=lambda grid, limit: 2,
        )
        with patch.object(generator, "_attempt", wraps=generator._attempt) as attempt:
            with self.assertRaises(GenerationError):
                generator.generate(Difficulty.HARD)
        targets = [call.args[0] for call in attempt.call_args_list]
        self.assertEqual(
            targets,
            [HOLE_TARGETS[Difficulty.HARD]] * 2 + [HOLE_TARGETS[Difficulty.MEDIUM]] * 2,
        )

    def test_solution_limit_below_two_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            GeneratorConfig(solution_limit=1)


class CancellationTests(unittest.TestCase):
    def test_cancelled_before_start(self) -> None:
        event = threading.Event()
        event.set()
        with self.assertRaises(GenerationCancelled):
            PuzzleGenerator(GeneratorConfig(seed=1)).generate("easy", cancel_event=event)

    def test_cancelled_between_attempts(self) -> None:
        event = threading.Event()
        generator = PuzzleGenerator(GeneratorConfig(seed=1))

        def cancel_and_fail(target):
            event.set()
            return None

        with patch.object(generator, "_attempt", side_effect=cancel_and_fail) as attempt:
            with self.assertRaises(GenerationCancelled):
                generator.generate("hard", cancel_event=event)
        self.assertEqual(attempt.call_count, 1)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
