"""Data models supporting the sudoku generator."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .constants import EMPTY, Difficulty, resolve_difficulty


Grid = List[List[int]]
Mask = List[List[bool]]


def build_mask(puzzle: Grid) -> Mask:
    """Mark the given (non-empty) cells of ``puzzle``."""
    return [[value != EMPTY for value in row] for row in puzzle]


def count_holes(puzzle: Grid) -> int:
    return sum(1 for row in puzzle for value in row if value == EMPTY)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Puzzle:
    """A generated puzzle together with its mask and the grid it was carved from."""

    puzzle: Grid
    mask: Mask
    solution: Grid
    difficulty: Difficulty = Difficulty.MEDIUM
    requested_difficulty: Difficulty = Difficulty.MEDIUM
    created_at: int = field(default_factory=_now_ms)

    @property
    def holes(self) -> int:
        return count_holes(self.puzzle)

    @property
    def fell_back(self) -> bool:
        return self.difficulty != self.requested_difficulty

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "puzzle": [list(row) for row in self.puzzle],
            "mask": [list(row) for row in self.mask],
            "solution": [list(row) for row in self.solution],
            "difficulty": self.difficulty.value,
            "requested_difficulty": self.requested_difficulty.value,
            "holes": self.holes,
            "ts": self.created_at,
        }

    @classmethod
    def from_jsonable(cls, doc: Dict[str, Any]) -> "Puzzle":
        puzzle = [[int(value) for value in row] for row in doc["puzzle"]]
        difficulty = resolve_difficulty(doc.get("difficulty"))
        return cls(
            puzzle=puzzle,
            # mask is always derived from the puzzle
            mask=build_mask(puzzle),
            solution=[[int(value) for value in row] for row in doc["solution"]],
            difficulty=difficulty,
            requested_difficulty=resolve_difficulty(doc.get("requested_difficulty", difficulty)),
            created_at=int(doc.get("ts", _now_ms())),
        )
