from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import check_max_steps, check_timeout, resolve_settings
from .models import Grid
from .render import render_grid
from .solver import InvalidPuzzleError, SearchLimitExceeded, UnsolvableError, solve
from .storage import BUILTIN_PUZZLES, builtin_grid, load_puzzle, save_grid

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minidoku",
        description="Solve an N x N Sudoku grid by backtracking search.",
    )
    parser.add_argument(
        "puzzle",
        nargs="?",
        default=None,
        help="Built-in puzzle name (see --list). Defaults to MINIDOKU_PUZZLE or 'mini-empty'.",
    )
    parser.add_argument("--file", "-f", default=None, help="Load the puzzle from a .json, .csv or text file.")
    parser.add_argument("--output", "-o", default=None, help="Also write the solved grid to a .json or .csv file.")
    parser.add_argument("--max-steps", type=int, default=None, help="Give up after this many tentative assignments.")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds.")
    parser.add_argument("--no-validate", action="store_true", help="Skip the clue consistency check before searching.")
    parser.add_argument("--list", action="store_true", help="List built-in puzzles and exit.")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-v info, -vv debug).")
    return parser


def _log_level(verbose: int, default: str) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    level = logging.getLevelName(default)
    return level if isinstance(level, int) else logging.WARNING


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = resolve_settings()
        if args.max_steps is not None:
            check_max_steps(args.max_steps, "--max-steps")
        if args.timeout is not None:
            check_timeout(args.timeout, "--timeout")
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=_log_level(args.verbose, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        for name in sorted(BUILTIN_PUZZLES):
            grid = builtin_grid(name)
            print(f"{name:12s} {grid.dimension}x{grid.dimension}")
        return 0

    try:
        grid: Grid = load_puzzle(args.file) if args.file else builtin_grid(args.puzzle or settings.puzzle)
    except KeyError as e:
        parser.error(e.args[0])
    except (OSError, ValueError) as e:
        parser.error(f"could not load puzzle: {e}")

    max_steps = args.max_steps if args.max_steps is not None else settings.max_steps
    timeout = args.timeout if args.timeout is not None else settings.timeout

    try:
        stats = solve(grid, validate=not args.no_validate, max_steps=max_steps, timeout=timeout)
    except InvalidPuzzleError as e:
        print(f"Invalid puzzle: {e}", file=sys.stderr)
        return 1
    except UnsolvableError as e:
        print(f"No solution: {e}", file=sys.stderr)
        return 1
    except SearchLimitExceeded as e:
        print(str(e), file=sys.stderr)
        return 2

    print(render_grid(grid))
    log.info("solved in %d ms (%d steps, %d backtracks)", stats.duration_ms, stats.steps, stats.backtracks)

    if args.output:
        try:
            save_grid(grid, args.output)
        except OSError as e:
            print(f"Could not write {args.output}: {e}", file=sys.stderr)
            return 2
    return 0
