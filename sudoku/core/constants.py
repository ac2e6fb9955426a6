"""Shared constants and enumerations for the sudoku generator."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


N = 9
SUB = 3
EMPTY = 0
DIGITS: Tuple[int, ...] = tuple(range(1, N + 1))

SOLUTION_LIMIT = 2
MAX_ATTEMPTS = 8


class Difficulty(str, Enum):
    """Puzzle difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Generation targets, not promises: uniqueness may stop carving earlier.
HOLE_TARGETS: Dict[Difficulty, int] = {
    Difficulty.EASY: 27,
    Difficulty.MEDIUM: 40,
    Difficulty.HARD: 54,
}

ERROR_LIMITS: Dict[Difficulty, int] = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 5,
    Difficulty.HARD: 9,
}

HINT_LIMITS: Dict[Difficulty, int] = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 6,
}

POOL_TARGETS: Dict[Difficulty, int] = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 2,
}


def resolve_difficulty(value: Difficulty | str | None) -> Difficulty:
    """Map a difficulty identifier to :class:`Difficulty`.

    Unknown identifiers fall back to ``MEDIUM`` without raising.
    """

    if isinstance(value, Difficulty):
        return value
    if isinstance(value, str):
        try:
            return Difficulty(value.strip().lower())
        except ValueError:
            pass
    return Difficulty.MEDIUM


def hole_target(difficulty: Difficulty | str | None) -> int:
    return HOLE_TARGETS[resolve_difficulty(difficulty)]
