"""Custom exception hierarchy for sudoku generation and play."""


class SudokuError(Exception):
    """Base exception for generator and session failures."""


class InvalidGridError(SudokuError):
    """Raised when a grid has the wrong shape or holds out-of-range values."""


class GenerationError(SudokuError):
    """Raised when no verified-unique puzzle can be produced, fallback included."""


class GenerationCancelled(SudokuError):
    """Raised when a pending generation request is cancelled by its caller."""


class ValidationError(SudokuError):
    """Raised when the puzzle integrity checks fail."""


class SessionError(SudokuError):
    """Base class for rejected game session actions."""


class CellLockedError(SessionError):
    """Raised when a move targets a given (read-only) cell."""


class SessionOverError(SessionError):
    """Raised when a move is attempted after the game has ended."""
