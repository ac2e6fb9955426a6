"""Sudoku puzzle generator with guaranteed unique solutions.

This package exposes the public API surface via:

- ``sudoku.engine.generator.generate_puzzle`` / ``PuzzleGenerator``: carve
  uniquely solvable puzzles out of random complete grids.
- ``sudoku.engine.counter.count_solutions``: the uniqueness oracle.
- ``sudoku.engine.pool.PuzzlePool``: background pre-generation per difficulty.
- ``sudoku.engine.session.GameSession``: errors, hints, undo and timer for play.
"""

from .core.constants import Difficulty
from .core.models import Puzzle
from .engine.counter import count_solutions, has_unique_solution
from .engine.generator import GeneratorConfig, PuzzleGenerator, generate_puzzle
from .engine.pool import PoolConfig, PuzzlePool
from .engine.session import GameSession

__all__ = [
    "Difficulty",
    "Puzzle",
    "count_solutions",
    "has_unique_solution",
    "GeneratorConfig",
    "PuzzleGenerator",
    "generate_puzzle",
    "PoolConfig",
    "PuzzlePool",
    "GameSession",
]

__version__ = "0.1.0"
