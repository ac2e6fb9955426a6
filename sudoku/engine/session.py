"""Game session state: player entries, strict error counting, hints and timer."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..core.constants import DIGITS, EMPTY, ERROR_LIMITS, HINT_LIMITS, N
from ..core.exceptions import CellLockedError, SessionError, SessionOverError
from ..core.models import Grid, Puzzle
from ..utils.logger import get_logger
from .grid import copy_grid


LOGGER = get_logger(__name__)


class SessionStatus(str, Enum):
    PLAYING = "playing"
    COMPLETED = "completed"
    FAILED = "failed"
    AUTO_SOLVED = "auto_solved"


class MoveResult(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    WRONG_AGAIN = "wrong_again"


class GameSession:
    """Tracks one player's progress through a generated puzzle.

    Entries are checked against the stored solution (strict mode). A wrong
    digit stays on the board and counts once per cell and digit; reaching the
    difficulty's error limit ends the game. The clock runs from construction
    until completion, failure or auto-solve, excluding paused time.
    """

    def __init__(self, puzzle: Puzzle, clock: Callable[[], float] = time.monotonic) -> None:
        self.puzzle = puzzle
        self.clock = clock
        self.error_limit = ERROR_LIMITS[puzzle.difficulty]
        self.hint_limit = HINT_LIMITS[puzzle.difficulty]
        self._reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _reset(self) -> None:
        self.board: Grid = copy_grid(self.puzzle.puzzle)
        self.history: List[Grid] = [copy_grid(self.board)]
        self.errors = 0
        self.hints = 0
        self.status = SessionStatus.PLAYING
        self._last_wrong: Dict[Tuple[int, int], int] = {}
        self._elapsed_before_pause = 0.0
        self._started_at: Optional[float] = self.clock()

    def restart(self) -> None:
        """Back to the starting givens with fresh counters and clock."""
        LOGGER.info("Session restarted")
        self._reset()

    @property
    def is_over(self) -> bool:
        return self.status != SessionStatus.PLAYING

    @property
    def hints_remaining(self) -> int:
        return max(0, self.hint_limit - self.hints)

    @property
    def errors_remaining(self) -> int:
        return max(0, self.error_limit - self.errors)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def enter(self, row: int, col: int, digit: int) -> MoveResult:
        self._ensure_playable(row, col)
        if digit not in DIGITS:
            raise SessionError(f"Digit must be 1-9, got {digit!r}")

        self.board[row][col] = digit
        self._push_history()
        if digit == self.puzzle.solution[row][col]:
            self._last_wrong.pop((row, col), None)
            self._check_completed()
            return MoveResult.CORRECT

        if self._last_wrong.get((row, col)) == digit:
            return MoveResult.WRONG_AGAIN
        self._last_wrong[(row, col)] = digit
        self.errors += 1
        LOGGER.debug("Wrong %s at R%sC%s (%s/%s errors)", digit, row + 1, col + 1, self.errors, self.error_limit)
        if self.errors >= self.error_limit:
            LOGGER.info("Game over: %s/%s errors", self.errors, self.error_limit)
            self._stop(SessionStatus.FAILED)
        return MoveResult.WRONG

    def clear(self, row: int, col: int) -> None:
        self._ensure_playable(row, col)
        if self.board[row][col] != EMPTY:
            self.board[row][col] = EMPTY
            self._push_history()

    def undo(self) -> bool:
        """Step back one snapshot; the initial board is never popped."""
        if self.is_over or len(self.history) <= 1:
            return False
        self.history.pop()
        self.board = copy_grid(self.history[-1])
        return True

    def hint(self, row: Optional[int] = None, col: Optional[int] = None) -> Optional[Tuple[int, int]]:
        """Reveal one solution digit and consume a hint.

        Fills the selected cell when it is an empty non-given, otherwise the
        first empty cell in row-major order. A hint is consumed even if no
        cell could be filled; nothing happens once the limit is reached.
        """
        if self.is_over or self.hints >= self.hint_limit:
            return None

        target: Optional[Tuple[int, int]] = None
        if row is not None and col is not None and self._is_open(row, col):
            target = (row, col)
        if target is None:
            target = next(
                ((r, c) for r in range(N) for c in range(N) if self._is_open(r, c)),
                None,
            )
        self.hints = min(self.hint_limit, self.hints + 1)
        if target is not None:
            r, c = target
            self.board[r][c] = self.puzzle.solution[r][c]
            self._push_history()
            self._check_completed()
        return target

    def solve(self) -> None:
        """Fill in the solution and lock the session; not a player completion."""
        if self.status == SessionStatus.AUTO_SOLVED:
            return
        self.board = copy_grid(self.puzzle.solution)
        self._stop(SessionStatus.AUTO_SOLVED)

    def mistakes(self) -> List[Tuple[int, int]]:
        return [
            (r, c)
            for r in range(N)
            for c in range(N)
            if self.board[r][c] != EMPTY and self.board[r][c] != self.puzzle.solution[r][c]
        ]

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------
    @property
    def is_paused(self) -> bool:
        return self._started_at is None and not self.is_over

    def pause(self) -> None:
        if self._started_at is None:
            return
        self._elapsed_before_pause += self.clock() - self._started_at
        self._started_at = None

    def resume(self) -> None:
        if self._started_at is None and not self.is_over:
            self._started_at = self.clock()

    def elapsed(self) -> float:
        if self._started_at is None:
            return self._elapsed_before_pause
        return self._elapsed_before_pause + self.clock() - self._started_at

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _ensure_playable(self, row: int, col: int) -> None:
        if self.is_over:
            raise SessionOverError(f"Session is {self.status.value}")
        if not (0 <= row < N and 0 <= col < N):
            raise SessionError(f"Cell ({row},{col}) is outside the grid")
        if self.puzzle.mask[row][col]:
            raise CellLockedError(f"Cell ({row},{col}) is a given")

    def _is_open(self, row: int, col: int) -> bool:
        return 0 <= row < N and 0 <= col < N and not self.puzzle.mask[row][col] and self.board[row][col] == EMPTY

    def _push_history(self) -> None:
        if self.history[-1] != self.board:
            self.history.append(copy_grid(self.board))

    def _check_completed(self) -> None:
        if self.board == self.puzzle.solution:
            LOGGER.info(
                "Solved in %.1fs with %s errors and %s hints", self.elapsed(), self.errors, self.hints
            )
            self._stop(SessionStatus.COMPLETED)

    def _stop(self, status: SessionStatus) -> None:
        self.pause()
        self.status = status
