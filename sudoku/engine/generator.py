"""Puzzle generation orchestration.

Each attempt walks the state machine::

    Init -> GeneratingComplete -> Carving -> Verifying -> Done | Retry

1. Build a random complete grid.
2. Carve holes in point-symmetric pairs (single cells when a pair breaks
   uniqueness), accepting each removal only while the counter still reports
   exactly one solution.
3. Re-verify the carved puzzle.

When every attempt fails the request is served once at the fallback
difficulty (``FallbackDone``); if that also exhausts, or the request was
already at the fallback difficulty, :class:`GenerationError` is raised.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.constants import (EMPTY, MAX_ATTEMPTS, N, SOLUTION_LIMIT, Difficulty,
                              hole_target, resolve_difficulty)
from ..core.exceptions import GenerationCancelled, GenerationError
from ..core.models import Grid, Puzzle, build_mask, count_holes
from ..utils.logger import get_logger
from .counter import count_solutions
from .grid import copy_grid, generate_complete_grid, shuffled, symmetric_partner


LOGGER = get_logger(__name__)

SolutionCounter = Callable[[Sequence[Sequence[int]], int], int]


@dataclass
class GeneratorConfig:
    seed: Optional[int] = None
    max_attempts: int = MAX_ATTEMPTS
    solution_limit: int = SOLUTION_LIMIT
    fallback_difficulty: Difficulty = Difficulty.MEDIUM
    max_fallback_depth: int = 1
    symmetric: bool = True

    def __post_init__(self) -> None:
        # a limit of 1 would stop the count before a second solution is seen
        if self.solution_limit < 2:
            raise ValueError("solution_limit must be at least 2")


class PuzzleGenerator:
    """Produce uniquely solvable puzzles by carving random complete grids."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
        counter: Optional[SolutionCounter] = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.counter: SolutionCounter = counter or count_solutions

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(
        self,
        difficulty: Difficulty | str | None = Difficulty.MEDIUM,
        cancel_event: Optional[threading.Event] = None,
    ) -> Puzzle:
        requested = resolve_difficulty(difficulty)
        return self._generate(requested, requested, cancel_event, depth=0)

    def _generate(
        self,
        level: Difficulty,
        requested: Difficulty,
        cancel_event: Optional[threading.Event],
        depth: int,
    ) -> Puzzle:
        target = hole_target(level)
        for attempt in range(1, self.config.max_attempts + 1):
            self._check_cancelled(cancel_event)
            LOGGER.debug(
                "Generation attempt %s/%s (%s, target %s holes)",
                attempt, self.config.max_attempts, level.value, target,
            )
            puzzle = self._attempt(target)
            if puzzle is None:
                LOGGER.info(
                    "Attempt %s/%s at %s failed verification, retrying",
                    attempt, self.config.max_attempts, level.value,
                )
                continue
            carved, solution = puzzle
            LOGGER.info(
                "Generated %s puzzle with %s/%s holes on attempt %s",
                level.value, count_holes(carved), target, attempt,
            )
            return Puzzle(
                puzzle=carved,
                mask=build_mask(carved),
                solution=solution,
                difficulty=level,
                requested_difficulty=requested,
            )

        if depth >= self.config.max_fallback_depth or level == self.config.fallback_difficulty:
            raise GenerationError(
                f"Unable to generate a unique {level.value} puzzle after "
                f"{self.config.max_attempts} attempts"
            )
        fallback = self.config.fallback_difficulty
        LOGGER.warning(
            "Exhausted %s attempts at %s, falling back to %s",
            self.config.max_attempts, level.value, fallback.value,
        )
        return self._generate(fallback, requested, cancel_event, depth=depth + 1)

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------
    def _attempt(self, target: int) -> Optional[Tuple[Grid, Grid]]:
        solution = generate_complete_grid(self.rng)
        puzzle = self.carve(solution, target)
        if not self._is_unique(puzzle):
            return None
        return puzzle, solution

    def carve(self, solution: Sequence[Sequence[int]], target: int) -> Grid:
        """Remove up to ``target`` cells from ``solution`` keeping a unique solution."""
        puzzle = copy_grid(solution)
        removed = 0
        order = shuffled(((r, c) for r in range(N) for c in range(N)), self.rng)
        for row, col in order:
            if removed >= target:
                break
            partner = symmetric_partner(row, col) if self.config.symmetric else (row, col)
            cells = [
                (r, c) for r, c in dict.fromkeys([(row, col), partner]) if puzzle[r][c] != EMPTY
            ]
            if not cells:
                continue
            if removed + len(cells) <= target and self._try_remove(puzzle, cells):
                removed += len(cells)
                continue
            if len(cells) == 1:
                # a lone cell was just tried as the "pair"
                continue
            if self.rng.random() < 0.5:
                cells.reverse()
            for cell in cells:
                if self._try_remove(puzzle, [cell]):
                    removed += 1
                    break
        LOGGER.debug("Carved %s/%s holes", removed, target)
        return puzzle

    def _try_remove(self, puzzle: Grid, cells: List[Tuple[int, int]]) -> bool:
        saved = [puzzle[r][c] for r, c in cells]
        for r, c in cells:
            puzzle[r][c] = EMPTY
        if self._is_unique(puzzle):
            return True
        for (r, c), value in zip(cells, saved):
            puzzle[r][c] = value
        return False

    def _is_unique(self, puzzle: Sequence[Sequence[int]]) -> bool:
        return self.counter(puzzle, self.config.solution_limit) == 1

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled")


def generate_puzzle(
    difficulty: Difficulty | str | None = Difficulty.MEDIUM,
    *,
    rng: Optional[random.Random] = None,
) -> Puzzle:
    """Generate one puzzle; unknown difficulties resolve to medium."""
    return PuzzleGenerator(rng=rng).generate(difficulty)
