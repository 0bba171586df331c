from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

Board = List[List[int]]  # 0 = empty, values 1..N


def box_size_of(n: int) -> int:
    """Return the box size for an N x N grid, rejecting non-square N."""
    if n < 1:
        raise ValueError(f"Invalid size: {n}. The dimension must be positive.")
    b = int(math.isqrt(n))
    if b * b != n:
        raise ValueError(f"Invalid size: {n}. Only perfect squares are supported (4, 9, 16, ...).")
    return b


@dataclass
class Cell:
    value: int = 0      # 0 = empty
    locked: bool = False


class Grid:
    # A board of size 4x4 is laid out like this; the number in each square
    # is its position in `cells`:
    #
    #   X:   0   1    2   3
    #      +---+---++---+---+
    # Y: 0 | 0 | 1 || 2 | 3 |
    #      |---+---++---+---|
    #    1 | 4 | 5 || 6 | 7 |
    #      |===+===++===+===|
    #    2 | 8 | 9 || 10| 11|
    #      |---+---++---+---|
    #    3 | 12| 13|| 14| 15|
    #      +---+---++---+---+
    #
    # index = y * N + x

    def __init__(self, dimension: int) -> None:
        self.box_size: int = box_size_of(dimension)
        self.dimension: int = dimension
        self.cells: List[Cell] = [Cell() for _ in range(dimension * dimension)]

    @property
    def size(self) -> int:
        return self.dimension * self.dimension

    # -----------------------------
    # Addressing
    # -----------------------------

    def index_of(self, x: int, y: int) -> int:
        n = self.dimension
        if not (0 <= x < n and 0 <= y < n):
            raise IndexError(f"Coordinates ({x}, {y}) are outside a {n}x{n} grid.")
        return y * n + x

    def coords(self, index: int) -> Tuple[int, int]:
        if not 0 <= index < self.size:
            raise IndexError(f"Index {index} is outside a grid of {self.size} cells.")
        x = index % self.dimension
        y = (index - x) // self.dimension
        return x, y

    def cell_at(self, x: int, y: int) -> Cell:
        return self.cells[self.index_of(x, y)]

    def value_at(self, x: int, y: int) -> int:
        return self.cell_at(x, y).value

    def set_value(self, x: int, y: int, value: int) -> None:
        # Lock state is not checked here; the solver never writes a locked cell.
        self.cell_at(x, y).value = value

    def is_locked(self, x: int, y: int) -> bool:
        return self.cell_at(x, y).locked

    # -----------------------------
    # Loading
    # -----------------------------

    def load(self, values: Sequence[int]) -> None:
        """
        Set every cell from a flat row-major sequence of N*N values.
        Non-zero values become locked clues, zeros stay unlocked blanks.
        """
        if len(values) != self.size:
            raise ValueError(
                f"Expected {self.size} values for a {self.dimension}x{self.dimension} grid, got {len(values)}."
            )
        n = self.dimension
        for i, v in enumerate(values):
            if isinstance(v, bool) or not isinstance(v, int):
                raise ValueError(f"Invalid value at index {i}: {v!r} (not an integer).")
            if v < 0 or v > n:
                raise ValueError(f"Invalid value at index {i}: {v} (allowed: 0..{n}).")
        for cell, v in zip(self.cells, values):
            cell.value = v
            cell.locked = v != 0

    @classmethod
    def from_values(cls, values: Sequence[int]) -> "Grid":
        n = int(math.isqrt(len(values)))
        if n * n != len(values):
            raise ValueError(f"{len(values)} values do not form a square grid.")
        grid = cls(n)
        grid.load(values)
        return grid

    @classmethod
    def from_rows(cls, rows: Board) -> "Grid":
        n = len(rows)
        if n == 0 or any(len(row) != n for row in rows):
            raise ValueError("Board must be square (N x N).")
        grid = cls(n)
        grid.load([v for row in rows for v in row])
        return grid

    # -----------------------------
    # Views
    # -----------------------------

    def values(self) -> List[int]:
        return [cell.value for cell in self.cells]

    def rows(self) -> Board:
        n = self.dimension
        return [[self.cells[y * n + x].value for x in range(n)] for y in range(n)]

    def is_complete(self) -> bool:
        return all(cell.value != 0 for cell in self.cells)

    def copy(self) -> "Grid":
        other = Grid(self.dimension)
        other.cells = [Cell(cell.value, cell.locked) for cell in self.cells]
        return other

    def to_jsonable(self) -> dict:
        return {
            "dimension": self.dimension,
            "values": self.values(),
            "locked": [cell.locked for cell in self.cells],
        }

    @staticmethod
    def from_jsonable(raw: dict) -> "Grid":
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object, got {type(raw).__name__}.")
        values = raw.get("values", [])
        dimension = raw.get("dimension")
        locked = raw.get("locked")
        if not isinstance(values, list):
            raise ValueError(f"'values' must be a list, got {type(values).__name__}.")
        if dimension is not None and (isinstance(dimension, bool) or not isinstance(dimension, int)):
            raise ValueError(f"'dimension' must be an integer, got {dimension!r}.")
        if locked is not None and not isinstance(locked, list):
            raise ValueError(f"'locked' must be a list, got {type(locked).__name__}.")

        grid = Grid(dimension) if dimension is not None else Grid.from_values(values)
        if dimension is not None:
            grid.load(values)
        if locked is not None:
            # A saved mid-solve grid keeps its own lock flags; filled-in values stay unlocked.
            if len(locked) != grid.size:
                raise ValueError(f"Expected {grid.size} lock flags, got {len(locked)}.")
            for cell, flag in zip(grid.cells, locked):
                cell.locked = bool(flag) and cell.value != 0
        return grid

    def __repr__(self) -> str:
        return f"Grid(dimension={self.dimension}, values={self.values()!r})"
