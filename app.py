from __future__ import annotations

from typing import List, Tuple

import streamlit as st

from minidoku.config import resolve_settings
from minidoku.models import Grid
from minidoku.render import render_candidates
from minidoku.solver import SearchLimitExceeded, UnsolvableError, solve, validate_clues
from minidoku.storage import grid_to_csv

SUPPORTED_SIZES = [4, 9, 16]
DEFAULT_SIZE = 4

SETTINGS = resolve_settings()


def clue_key(n: int, index: int) -> str:
    return f"clue_{n}_{index}"


def clear_clues(n: int) -> None:
    for i in range(n * n):
        st.session_state[clue_key(n, i)] = ""


def read_clues(n: int) -> Tuple[Grid, List[str]]:
    """
    Build a Grid from the clue inputs, row-major. Blank or 0 is an empty cell.
    Inputs that are not a value in 1..N are reported and left empty.
    """
    grid = Grid(n)
    values: List[int] = [0] * grid.size
    errors: List[str] = []

    for i in range(grid.size):
        raw = str(st.session_state.get(clue_key(n, i), "")).strip()
        if not raw:
            continue
        x, y = grid.coords(i)
        if not raw.isdigit() or int(raw) > n:
            errors.append(f"Cell {i} at ({x}, {y}): '{raw}' is not a value in 1..{n}.")
            continue
        values[i] = int(raw)

    grid.load(values)
    return grid, errors


def input_widths(base: int, gap: float = 0.18) -> List[float]:
    # one narrow column between boxes
    widths: List[float] = []
    for box in range(base):
        if box:
            widths.append(gap)
        widths.extend([1.0] * base)
    return widths


def render_grid_html(grid: Grid, title: str) -> None:
    """Show the grid as an HTML table; box edges are thick and clues bold."""
    n = grid.dimension
    base = grid.box_size

    html = [f"<div class='grid-title'>{title}</div><table class='minidoku'>"]
    for y in range(n):
        html.append("<tr>")
        for x in range(n):
            cls = []
            if y % base == 0:
                cls.append("top")
            if x % base == 0:
                cls.append("left")
            if y == n - 1:
                cls.append("bottom")
            if x == n - 1:
                cls.append("right")
            if grid.is_locked(x, y):
                cls.append("clue")
            v = grid.value_at(x, y)
            html.append(f"<td class='{' '.join(cls)}'>{v or ''}</td>")
        html.append("</tr>")
    html.append("</table>")

    st.markdown("".join(html), unsafe_allow_html=True)


st.set_page_config(page_title="minidoku", layout="wide")

st.markdown(
    """
<style>
div[data-testid="stTextInput"] input { text-align: center; font-size: 20px !important; }
.grid-title { font-weight: 600; margin: 0.5rem 0 0.35rem 0; }
table.minidoku { border-collapse: collapse; }
table.minidoku td {
    width: 2.6rem;
    height: 2.6rem;
    text-align: center;
    font-size: 20px;
    border: 1px solid #ccc;
}
table.minidoku td.clue { font-weight: 700; }
table.minidoku td.top { border-top: 3px solid #555; }
table.minidoku td.left { border-left: 3px solid #555; }
table.minidoku td.bottom { border-bottom: 3px solid #555; }
table.minidoku td.right { border-right: 3px solid #555; }
</style>
""",
    unsafe_allow_html=True,
)

st.title("minidoku")
st.caption("Enter the clues; leave a cell blank (or 0) to have it filled in. Cells are filled in reading order, smallest value first.")

with st.sidebar:
    st.header("Settings")
    if "size" not in st.session_state:
        st.session_state.size = DEFAULT_SIZE

    size = st.selectbox("Grid size", SUPPORTED_SIZES, index=SUPPORTED_SIZES.index(st.session_state.size))
    if size != st.session_state.size:
        st.session_state.size = size
        clear_clues(size)

    max_steps = st.number_input("Step limit (0 = none)", min_value=0, value=SETTINGS.max_steps or 0, step=1000)
    timeout = st.number_input(
        "Time limit in seconds (0 = none)",
        min_value=0.0,
        value=float(SETTINGS.timeout or 0.0),
        step=1.0,
    )

    st.divider()
    if st.button("Clear clues", use_container_width=True):
        clear_clues(st.session_state.size)

n = int(st.session_state.size)
preview = Grid(n)

st.subheader("Clues")

with st.form("clues", clear_on_submit=False):
    for y in range(n):
        cols = st.columns(input_widths(preview.box_size), gap="small")
        for x in range(n):
            i = preview.index_of(x, y)
            key = clue_key(n, i)
            st.session_state.setdefault(key, "")
            with cols[x + x // preview.box_size]:
                st.text_input(label=f"cell {i}", key=key, label_visibility="collapsed")

    check_col, solve_col = st.columns(2)
    validate_clicked = check_col.form_submit_button("Validate", use_container_width=True)
    solve_clicked = solve_col.form_submit_button("Solve", use_container_width=True)

grid, input_errors = read_clues(n)

if not (validate_clicked or solve_clicked):
    render_grid_html(grid, "Current clues")
    st.stop()

if input_errors:
    st.error("Please fix these cells:")
    st.write("\n".join(f"- {e}" for e in input_errors))
    st.stop()

try:
    validate_clues(grid)
except UnsolvableError as e:
    st.error(str(e))
    st.stop()

st.success("Clues are consistent.")
render_grid_html(grid, "Current clues")

with st.expander("Candidates for empty cells"):
    st.dataframe(render_candidates(grid), use_container_width=True, hide_index=True)

if solve_clicked:
    try:
        stats = solve(grid, validate=False, max_steps=int(max_steps) or None, timeout=float(timeout) or None)
    except UnsolvableError as e:
        st.error(f"No solution: {e}")
    except SearchLimitExceeded as e:
        st.warning(str(e))
    else:
        st.success(f"Solved in {stats.duration_ms} ms ({stats.steps} steps, {stats.backtracks} backtracks).")
        render_grid_html(grid, "Solution")
        st.download_button(
            "Download solution as CSV",
            data=grid_to_csv(grid),
            file_name=f"minidoku_{n}x{n}.csv",
            mime="text/csv",
        )
