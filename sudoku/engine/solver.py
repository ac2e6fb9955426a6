"""CP-SAT sudoku solver using OR-Tools."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple, Union

from ortools.sat.python import cp_model

from ..core.constants import EMPTY, N
from ..core.models import Grid
from ..utils.logger import get_logger
from .grid import ensure_grid, find_conflicts, units

LOGGER = get_logger(__name__)


def solve_grid(
    grid: Sequence[Sequence[int]],
    timeout: float = 10.0,
    num_workers: int = 4,
) -> Optional[Grid]:
    """Fill every empty cell of ``grid`` via CP-SAT.

    Args:
        grid: 9x9 givens, 0 for blanks.
        timeout: Solver time limit in seconds.
        num_workers: CP-SAT search workers.

    Returns:
        The solved grid, or None if the givens conflict or no completion exists.
    """
    givens = ensure_grid(grid)
    conflicts = find_conflicts(givens)
    if conflicts:
        LOGGER.warning("CP-SAT: givens conflict at %s", conflicts)
        return None

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell variables (constants for givens)
    # ------------------------------------------------------------------
    cell_vars: Dict[Tuple[int, int], Union[cp_model.IntVar, int]] = {}
    for r in range(N):
        for c in range(N):
            value = givens[r][c]
            if value != EMPTY:
                cell_vars[(r, c)] = value
            else:
                cell_vars[(r, c)] = model.new_int_var(1, N, f"V_{r}_{c}")

    # ------------------------------------------------------------------
    # Step 2: Unit constraints
    # ------------------------------------------------------------------
    for unit in units():
        model.add_all_different([cell_vars[cell] for cell in unit])

    # ------------------------------------------------------------------
    # Step 3: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = num_workers

    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no solution found (status=%s)", solver.status_name(status))
        return None
    LOGGER.debug("CP-SAT: solution found in %.2fs", solver.wall_time)

    # ------------------------------------------------------------------
    # Step 4: Extract solution
    # ------------------------------------------------------------------
    return [[_resolve_var(solver, cell_vars[(r, c)]) for c in range(N)] for r in range(N)]


def _resolve_var(solver: cp_model.CpSolver, var_or_const) -> int:
    """Get the value of a variable or constant."""
    if isinstance(var_or_const, cp_model.IntVar):
        return int(solver.value(var_or_const))
    return var_or_const
