"""Tests for candidate computation, validation and the backtracking search."""

import itertools
from types import SimpleNamespace

import pytest

from minidoku import solver
from minidoku.models import Grid
from minidoku.solver import (
    InvalidPuzzleError,
    SearchLimitExceeded,
    UnsolvableError,
    candidates,
    is_solution,
    solve,
    solve_from,
    validate_clues,
)
from minidoku.storage import builtin_grid

MINI_SOLUTION = [
    1, 2, 3, 4,
    3, 4, 1, 2,
    2, 1, 4, 3,
    4, 3, 2, 1,
]

CLASSIC_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]


class TestCandidates:
    """Tests for row/column/box exclusion."""

    def test_blank_grid_allows_everything(self):
        assert candidates(Grid(4), 2, 3) == {1, 2, 3, 4}

    def test_row_and_column_exclusion(self):
        grid = Grid.from_values([1, 2, 3, 4] + [0] * 12)
        assert candidates(grid, 0, 1) == {3, 4}
        assert candidates(grid, 3, 2) == {1, 2, 3}

    def test_box_exclusion(self):
        """A value diagonal in the same box is excluded even off-row and off-column."""
        grid = Grid(4)
        grid.set_value(1, 1, 3)
        assert candidates(grid, 0, 0) == {1, 2, 4}
        assert candidates(grid, 2, 2) == {1, 2, 3, 4}

    def test_cell_itself_is_ignored(self):
        grid = Grid(4)
        grid.set_value(0, 0, 1)
        assert candidates(grid, 0, 0) == {1, 2, 3, 4}

    def test_nine_by_nine(self):
        grid = builtin_grid("classic")
        assert candidates(grid, 2, 0) == {1, 2, 4}

    def test_sixteen_by_sixteen_box(self):
        """Boxes are 4x4 on a 16x16 grid."""
        grid = Grid(16)
        grid.set_value(7, 7, 9)
        assert 9 not in candidates(grid, 4, 4)
        assert 9 in candidates(grid, 8, 4)


class TestValidation:
    """Tests for the clue consistency check."""

    def test_row_duplicate(self):
        grid = Grid.from_values([1, 1] + [0] * 14)
        with pytest.raises(InvalidPuzzleError) as exc:
            validate_clues(grid)
        assert exc.value.index == 1
        assert (exc.value.x, exc.value.y) == (1, 0)
        assert exc.value.value == 1

    def test_column_duplicate(self):
        values = [0] * 16
        values[2] = 4
        values[14] = 4
        with pytest.raises(InvalidPuzzleError) as exc:
            validate_clues(Grid.from_values(values))
        assert exc.value.index == 14

    def test_box_duplicate(self):
        values = [0] * 16
        values[0] = 2
        values[5] = 2
        with pytest.raises(InvalidPuzzleError) as exc:
            validate_clues(Grid.from_values(values))
        assert exc.value.index == 5

    def test_consistent_clues_pass(self):
        validate_clues(builtin_grid("classic"))

    def test_invalid_is_unsolvable(self):
        """Callers that only catch UnsolvableError still see bad clues."""
        assert issubclass(InvalidPuzzleError, UnsolvableError)


class TestSolve:
    """Tests for the backtracking search."""

    def test_known_solution(self):
        """Row 0 given as 1,2,3,4 fills in to a valid grid and keeps row 0."""
        grid = Grid.from_values([1, 2, 3, 4] + [0] * 12)
        stats = solve(grid)
        assert is_solution(grid)
        assert grid.rows()[0] == [1, 2, 3, 4]
        assert grid.values() == MINI_SOLUTION
        assert stats.steps == 12
        assert stats.backtracks == 0

    def test_empty_mini(self):
        grid = Grid(4)
        solve(grid)
        assert grid.values() == MINI_SOLUTION

    def test_empty_nine_by_nine(self):
        """A blank 9x9 grid exercises the full search depth."""
        grid = builtin_grid("empty")
        solve(grid)
        assert is_solution(grid)
        assert grid.rows()[0] == list(range(1, 10))

    def test_classic_puzzle(self):
        grid = builtin_grid("classic")
        clues = [(i, c.value) for i, c in enumerate(grid.cells) if c.locked]
        stats = solve(grid)
        assert grid.rows() == CLASSIC_SOLUTION
        assert all(grid.cells[i].value == v for i, v in clues)
        assert stats.backtracks > 0

    def test_deterministic(self):
        """Solving the same puzzle twice gives identical grids."""
        first = builtin_grid("classic")
        second = builtin_grid("classic")
        solve(first)
        solve(second)
        assert first.values() == second.values()

    def test_already_solved_is_unchanged(self):
        grid = Grid.from_values(MINI_SOLUTION)
        stats = solve(grid)
        assert grid.values() == MINI_SOLUTION
        assert stats.steps == 0

    def test_duplicate_clues_are_unsolvable(self):
        grid = Grid.from_values([1, 1] + [0] * 14)
        with pytest.raises(UnsolvableError):
            solve(grid)

    def test_duplicate_clues_without_validation(self):
        """Search alone also rejects the puzzle, failing at the first blank cell."""
        grid = Grid.from_values([1, 1] + [0] * 14)
        with pytest.raises(UnsolvableError) as exc:
            solve(grid, validate=False)
        assert not isinstance(exc.value, InvalidPuzzleError)
        assert exc.value.index == 2
        assert grid.values() == [1, 1] + [0] * 14

    def test_dead_cell_reports_its_index(self):
        """A blank whose row and column use up every value fails immediately."""
        values = [1, 2, 3, 0] + [0] * 12
        values[7] = 4
        grid = Grid.from_values(values)
        with pytest.raises(UnsolvableError) as exc:
            solve(grid)
        assert exc.value.index == 3
        assert (exc.value.x, exc.value.y) == (3, 0)

    def test_locked_cells_never_change(self):
        values = [0] * 16
        values[5] = 1
        values[10] = 2
        grid = Grid.from_values(values)
        solve(grid)
        assert is_solution(grid)
        assert grid.value_at(1, 1) == 1
        assert grid.value_at(2, 2) == 2

    def test_unlocked_values_are_cleared(self):
        """Leftover values in unlocked cells do not block a solvable grid."""
        grid = Grid.from_jsonable({
            "dimension": 4,
            "values": [0, 2, 3, 4, 1] + [0] * 11,
            "locked": [False] * 16,
        })
        solve(grid)
        assert grid.values() == MINI_SOLUTION

    def test_saved_partial_solve_resumes(self):
        """A grid saved mid-solve keeps its clues and solves again."""
        grid = Grid.from_values([1, 2, 3, 4] + [0] * 12)
        grid.set_value(0, 1, 4)
        grid.set_value(1, 1, 3)
        restored = Grid.from_jsonable(grid.to_jsonable())
        solve(restored)
        assert restored.values() == MINI_SOLUTION
        assert restored.is_locked(0, 0)

    def test_solve_from_keeps_earlier_values(self):
        """Unlocked cells before the start index stay as they are."""
        grid = Grid(4)
        grid.set_value(0, 0, 2)
        grid.set_value(1, 0, 1)
        solve_from(grid, 2)
        assert grid.rows()[0] == [2, 1, 3, 4]
        assert is_solution(grid)


class TestLastCell:
    """Tests for the final index of the grid."""

    def test_locked_last_cell(self):
        grid = Grid.from_values(MINI_SOLUTION)
        stats = solve_from(grid, 15)
        assert stats.steps == 0
        assert grid.values() == MINI_SOLUTION

    def test_single_candidate_is_placed(self):
        grid = Grid.from_values(MINI_SOLUTION[:15] + [0])
        stats = solve_from(grid, 15)
        assert grid.value_at(3, 3) == 1
        assert stats.steps == 1

    def test_several_candidates_take_the_smallest(self):
        """The last cell is not required to have exactly one candidate."""
        grid = Grid(4)
        solve_from(grid, 15)
        assert grid.value_at(3, 3) == 1

    def test_past_the_end_succeeds(self):
        grid = Grid(4)
        assert solve_from(grid, 16).steps == 0

    def test_bad_start_index(self):
        with pytest.raises(IndexError):
            solve_from(Grid(4), 17)


class TestLimits:
    """Tests for the step and time budgets."""

    def test_step_limit(self):
        grid = builtin_grid("empty")
        with pytest.raises(SearchLimitExceeded) as exc:
            solve(grid, max_steps=10)
        assert exc.value.steps == 10
        assert grid.values() == [0] * 81

    def test_step_limit_large_enough(self):
        grid = Grid.from_values([1, 2, 3, 4] + [0] * 12)
        solve(grid, max_steps=12)
        assert is_solution(grid)

    def test_timeout(self, monkeypatch):
        ticks = itertools.count()
        monkeypatch.setattr(solver, "time", SimpleNamespace(monotonic=lambda: float(next(ticks))))
        grid = builtin_grid("classic")
        with pytest.raises(SearchLimitExceeded):
            solve(grid, timeout=0.5)
        assert grid.values() == builtin_grid("classic").values()

    def test_limit_is_not_unsolvable(self):
        assert not issubclass(SearchLimitExceeded, UnsolvableError)


class TestIsSolution:
    """Tests for the solution check."""

    def test_incomplete(self):
        assert not is_solution(Grid(4))

    def test_latin_square_with_bad_boxes(self):
        """Rows and columns fine but boxes repeat values."""
        grid = Grid.from_values([
            1, 2, 3, 4,
            2, 3, 4, 1,
            3, 4, 1, 2,
            4, 1, 2, 3,
        ])
        assert not is_solution(grid)

    def test_valid(self):
        assert is_solution(Grid.from_values(MINI_SOLUTION))
