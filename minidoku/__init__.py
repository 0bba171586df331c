"""Backtracking solver for N x N Sudoku grids (N a perfect square)."""

from .models import Cell, Grid, box_size_of
from .solver import (
    InvalidPuzzleError,
    SearchLimitExceeded,
    SolverError,
    SolveStats,
    UnsolvableError,
    candidates,
    is_solution,
    solve,
    solve_from,
    validate_clues,
)

__all__ = [
    "Cell",
    "Grid",
    "box_size_of",
    "InvalidPuzzleError",
    "SearchLimitExceeded",
    "SolverError",
    "SolveStats",
    "UnsolvableError",
    "candidates",
    "is_solution",
    "solve",
    "solve_from",
    "validate_clues",
]
