"""Deterministic rule validation for generated puzzles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..core.constants import EMPTY, N, hole_target
from ..core.exceptions import InvalidGridError, ValidationError
from ..core.models import Puzzle
from ..utils.logger import get_logger
from .counter import count_solutions
from .grid import ensure_grid, is_complete_valid


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class PuzzleValidator:
    """Runs deterministic validation over a finished puzzle."""

    def __init__(self, check_uniqueness: bool = True) -> None:
        self.check_uniqueness = check_uniqueness

    def validate(self, puzzle: Puzzle) -> ValidationResult:
        messages: List[str] = []
        try:
            self._check_shapes(puzzle)
            self._check_solution(puzzle)
            self._check_mask(puzzle)
            self._check_subset(puzzle)
            self._check_hole_bound(puzzle)
            if self.check_uniqueness:
                self._check_unique(puzzle)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def _check_shapes(self, puzzle: Puzzle) -> None:
        for name, grid in (("puzzle", puzzle.puzzle), ("solution", puzzle.solution)):
            try:
                ensure_grid(grid)
            except InvalidGridError as exc:
                raise ValidationError(f"Malformed {name}: {exc}") from exc
        if len(puzzle.mask) != N or any(len(row) != N for row in puzzle.mask):
            raise ValidationError(f"Mask must be {N}x{N}")

    def _check_solution(self, puzzle: Puzzle) -> None:
        if not is_complete_valid(puzzle.solution):
            raise ValidationError("Solution is not a complete valid grid")

    def _check_mask(self, puzzle: Puzzle) -> None:
        for r in range(N):
            for c in range(N):
                if puzzle.mask[r][c] != (puzzle.puzzle[r][c] != EMPTY):
                    raise ValidationError(f"Mask disagrees with puzzle at ({r},{c})")

    def _check_subset(self, puzzle: Puzzle) -> None:
        for r in range(N):
            for c in range(N):
                value = puzzle.puzzle[r][c]
                if value != EMPTY and value != puzzle.solution[r][c]:
                    raise ValidationError(
                        f"Given {value} at ({r},{c}) differs from solution {puzzle.solution[r][c]}"
                    )

    def _check_hole_bound(self, puzzle: Puzzle) -> None:
        target = hole_target(puzzle.difficulty)
        if puzzle.holes > target:
            raise ValidationError(
                f"{puzzle.holes} holes exceed the {puzzle.difficulty.value} target of {target}"
            )

    def _check_unique(self, puzzle: Puzzle) -> None:
        solutions = count_solutions(puzzle.puzzle, limit=2)
        if solutions != 1:
            raise ValidationError(
                "Puzzle has no solution" if solutions == 0 else "Puzzle has multiple solutions"
            )
