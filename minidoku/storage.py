from __future__ import annotations

import json
import os
import re
from typing import Dict, List

from .models import Grid

# Row-major puzzle strings; "." or "0" is a blank.
BUILTIN_PUZZLES: Dict[str, str] = {
    "mini-empty": "." * 16,
    "mini-row": "1234" + "." * 12,
    "classic": (
        "53..7...."
        "6..195..."
        ".98....6."
        "8...6...3"
        "4..8.3..1"
        "7...2...6"
        ".6....28."
        "...419..5"
        "....8..79"
    ),
    "empty": "." * 81,
}


def parse_values(text: str) -> List[int]:
    """
    Turn a puzzle string into a flat list of ints. Values may be run
    together ("53..7....", one row per line or not) or separated by commas
    or spaces ("5,3,0,..."); grids with N >= 10 need separators.
    """
    text = text.strip()
    if re.search(r"[, \t]", text):
        tokens = [t for t in re.split(r"[,\s]+", text) if t]
    else:
        tokens = list("".join(text.split()))

    values: List[int] = []
    for pos, tok in enumerate(tokens):
        if tok == ".":
            values.append(0)
        elif tok.isdigit():
            values.append(int(tok))
        else:
            raise ValueError(f"Invalid puzzle token at position {pos}: {tok!r}")
    return values


def builtin_grid(name: str) -> Grid:
    if name not in BUILTIN_PUZZLES:
        raise KeyError(f"Unknown puzzle {name!r}; choose from {', '.join(sorted(BUILTIN_PUZZLES))}.")
    return Grid.from_values(parse_values(BUILTIN_PUZZLES[name]))


def grid_to_csv(grid: Grid) -> bytes:
    lines = [",".join(str(v) for v in row) for row in grid.rows()]
    return ("\n".join(lines) + "\n").encode("utf-8")


def csv_to_grid(text: str) -> Grid:
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            rows.append([int(tok.strip() or 0) for tok in line.split(",")])
        except ValueError as e:
            raise ValueError(f"Invalid CSV row {line!r}: {e}") from e
    return Grid.from_rows(rows)


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def load_puzzle(path: str) -> Grid:
    """Read a puzzle from .json, .csv or a plain puzzle-string file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()
    suffix = os.path.splitext(path)[1].lower()
    if suffix == ".json":
        return Grid.from_jsonable(json.loads(raw))
    if suffix == ".csv":
        return csv_to_grid(raw)
    return Grid.from_values(parse_values(raw))


def save_grid(grid: Grid, path: str) -> None:
    ensure_parent_dir(path)
    if os.path.splitext(path)[1].lower() == ".csv":
        with open(path, "wb") as f:
            f.write(grid_to_csv(grid))
        return
    with open(path, "w", encoding="utf-8") as f:
        json.dump(grid.to_jsonable(), f, ensure_ascii=False, indent=2)
