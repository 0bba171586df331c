from __future__ import annotations

from typing import List

import pandas as pd

from .models import Grid
from .solver import candidates


def _cell_width(n: int) -> int:
    return len(str(n)) + 2


def _rule(grid: Grid, fill: str) -> str:
    w = _cell_width(grid.dimension)
    b = grid.box_size
    box = "+" + "+".join([fill * w] * b) + "+"
    return box * b


def render_grid(grid: Grid, blank: str = ".") -> str:
    """
    Draw the grid with ASCII borders. A doubled bar separates boxes
    left to right, and a `|===+` rule separates them top to bottom:

        +---+---++---+---+
        | 1 | 2 || 3 | 4 |
        +---+---++---+---+
        | 3 | 4 || 1 | 2 |
        |===+===++===+===|
    """
    n = grid.dimension
    b = grid.box_size
    w = _cell_width(n)
    thin = _rule(grid, "-")
    thick = "|" + _rule(grid, "=")[1:-1] + "|"

    lines: List[str] = []
    for y in range(n):
        lines.append(thick if y > 0 and y % b == 0 else thin)
        parts = []
        for x in range(n):
            v = grid.value_at(x, y)
            text = blank if v == 0 else str(v)
            parts.append("|" + text.rjust(w - 1) + " ")
            if (x + 1) % b == 0:
                parts.append("|")
        lines.append("".join(parts))
    lines.append(thin)
    return "\n".join(lines)


def render_candidates(grid: Grid) -> pd.DataFrame:
    """One row per empty cell with the values it could still take."""
    rows = []
    for i, cell in enumerate(grid.cells):
        if cell.value != 0:
            continue
        x, y = grid.coords(i)
        opts = sorted(candidates(grid, x, y))
        rows.append(
            {
                "index": i,
                "x": x,
                "y": y,
                "count": len(opts),
                "candidates": " ".join(str(v) for v in opts),
            }
        )
    if not rows:
        return pd.DataFrame(columns=["index", "x", "y", "count", "candidates"])
    return pd.DataFrame(rows)
