from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple

from .models import Grid

log = logging.getLogger(__name__)


# -----------------------------
# Errors
# -----------------------------

class SolverError(Exception):
    """Base class for everything the solver raises."""


class UnsolvableError(SolverError):
    """No assignment exists; `index` is the cell where the search gave up."""

    def __init__(self, index: int, x: int, y: int, message: str = "") -> None:
        self.index = index
        self.x = x
        self.y = y
        super().__init__(message or f"Cell {index} at ({x}, {y}) has no remaining values.")


class InvalidPuzzleError(UnsolvableError):
    """The loaded clues already repeat a value in a row, column or box."""

    def __init__(self, index: int, x: int, y: int, value: int) -> None:
        self.value = value
        super().__init__(
            index,
            x,
            y,
            f"Conflict: value {value} appears twice in a row/column/box (cell {index} at ({x}, {y})).",
        )


class SearchLimitExceeded(SolverError):
    def __init__(self, steps: int, elapsed: float, reason: str) -> None:
        self.steps = steps
        self.elapsed = elapsed
        super().__init__(f"Search stopped after {steps} steps ({elapsed:.3f}s): {reason}.")


@dataclass
class SolveStats:
    steps: int
    backtracks: int
    duration_ms: int


# -----------------------------
# Candidates
# -----------------------------

def candidates(grid: Grid, x: int, y: int) -> Set[int]:
    """
    Values in 1..N not held by any other cell in the same row, column or box.
    """
    n = grid.dimension
    b = grid.box_size
    cells = grid.cells
    remaining = set(range(1, n + 1))

    row = y * n
    for ix in range(n):
        if ix != x:
            remaining.discard(cells[row + ix].value)

    for iy in range(n):
        if iy != y:
            remaining.discard(cells[iy * n + x].value)

    x0 = (x // b) * b
    y0 = (y // b) * b
    for iy in range(y0, y0 + b):
        for ix in range(x0, x0 + b):
            if ix != x or iy != y:
                remaining.discard(cells[iy * n + ix].value)

    return remaining


# -----------------------------
# Validation
# -----------------------------

def _box_index(x: int, y: int, base: int) -> int:
    return (y // base) * base + (x // base)


def validate_clues(grid: Grid) -> None:
    """
    Raise InvalidPuzzleError for the first filled cell (in index order)
    whose value already appears in its row, column or box.
    """
    n = grid.dimension
    row_used = [0] * n
    col_used = [0] * n
    box_used = [0] * n

    for i, cell in enumerate(grid.cells):
        v = cell.value
        if v == 0:
            continue
        x, y = grid.coords(i)
        bit = 1 << v
        b = _box_index(x, y, grid.box_size)

        if (row_used[y] & bit) or (col_used[x] & bit) or (box_used[b] & bit):
            raise InvalidPuzzleError(i, x, y, v)

        row_used[y] |= bit
        col_used[x] |= bit
        box_used[b] |= bit


def is_solution(grid: Grid) -> bool:
    """True when every row, column and box holds 1..N exactly once."""
    n = grid.dimension
    b = grid.box_size
    full = set(range(1, n + 1))
    rows = grid.rows()

    for r in range(n):
        if set(rows[r]) != full or len(rows[r]) != n:
            return False
    for c in range(n):
        if {rows[r][c] for r in range(n)} != full:
            return False
    for by in range(0, n, b):
        for bx in range(0, n, b):
            box = {rows[y][x] for y in range(by, by + b) for x in range(bx, bx + b)}
            if box != full:
                return False
    return True


# -----------------------------
# Search
# -----------------------------

def solve(
    grid: Grid,
    *,
    validate: bool = True,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None,
) -> SolveStats:
    """
    Fill every unlocked cell of `grid` in place. Values already sitting in
    unlocked cells are cleared first; only locked clues constrain the search.

    Raises UnsolvableError (or InvalidPuzzleError when `validate` is set and
    the clues conflict) if no assignment exists, and SearchLimitExceeded when
    `max_steps` tentative assignments or `timeout` seconds are used up.
    The grid must not be shared with another solve while this one runs.
    """
    return solve_from(grid, 0, validate=validate, max_steps=max_steps, timeout=timeout)


def solve_from(
    grid: Grid,
    index: int,
    *,
    validate: bool = True,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None,
) -> SolveStats:
    """
    Depth-first search over cells `index`..N*N-1 in index order.

    Locked cells are passed over. Each unlocked cell tries its candidates in
    ascending order; the first value that lets every later cell be filled is
    kept. A cell that runs out of values is reset to 0 and the previous
    unlocked cell moves on to its next value. Frames live on an explicit
    stack so grid size never touches the interpreter's recursion limit.
    """
    total = grid.size
    if not 0 <= index <= total:
        raise IndexError(f"Start index {index} is outside 0..{total}.")
    cells = grid.cells

    # Unlocked cells from `index` on are search state, not constraints.
    for cell in cells[index:]:
        if not cell.locked:
            cell.value = 0
    if validate:
        validate_clues(grid)

    start = time.monotonic()
    deadline = start + timeout if timeout is not None else None
    steps = 0
    backtracks = 0
    stack: List[Tuple[int, Iterator[int]]] = []

    log.info("solve start: %dx%d grid from index %d", grid.dimension, grid.dimension, index)

    while True:
        while index < total and cells[index].locked:
            index += 1
        if index == total:
            duration_ms = int((time.monotonic() - start) * 1000)
            log.info("solve end in %d ms; %d steps, %d backtracks", duration_ms, steps, backtracks)
            return SolveStats(steps=steps, backtracks=backtracks, duration_ms=duration_ms)

        x, y = grid.coords(index)
        options = candidates(grid, x, y)
        failed = index
        if options:
            stack.append((index, iter(sorted(options))))

        while stack:
            frame_index, pending = stack[-1]
            cell = cells[frame_index]
            cell.value = 0
            value = next(pending, None)
            if value is None:
                stack.pop()
                failed = frame_index
                backtracks += 1
                if log.isEnabledFor(logging.DEBUG):
                    log.debug("backtrack: cell %d at %s exhausted", frame_index, grid.coords(frame_index))
                continue

            steps += 1
            if max_steps is not None and steps > max_steps:
                _abort(stack, grid)
                raise SearchLimitExceeded(steps - 1, time.monotonic() - start, f"step limit {max_steps} reached")
            if deadline is not None and time.monotonic() > deadline:
                _abort(stack, grid)
                raise SearchLimitExceeded(steps - 1, time.monotonic() - start, f"timeout of {timeout}s reached")

            cell.value = value
            index = frame_index + 1
            break
        else:
            fx, fy = grid.coords(failed)
            log.info("solve failed at cell %d (%d, %d) after %d steps", failed, fx, fy, steps)
            if failed == index and not options:
                raise UnsolvableError(failed, fx, fy)
            raise UnsolvableError(failed, fx, fy, f"Cell {failed} at ({fx}, {fy}): tried all values, none led to a solution.")


def _abort(stack: List[Tuple[int, Iterator[int]]], grid: Grid) -> None:
    for frame_index, _ in stack:
        grid.cells[frame_index].value = 0
