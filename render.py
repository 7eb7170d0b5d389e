from html import escape
from typing import Iterable, List, Optional, Sequence, Tuple

from remap import remap

# Display value -> cell colour; anything further from the goal is grey.
VALUE_COLORS = (
    "#2E8B57",  # goal reached
    "#B22222",
    "#FF8C00",
    "#4682B4",
    "#8B008B",
)
COLOR_GRAY = "#555"
COLOR_HIGHLIGHT = "#ffffff"


def _colors(value: int, highlighted: bool) -> Tuple[str, str, str]:
    if highlighted:
        return COLOR_HIGHLIGHT, "#2c1810", "bold"
    bg = VALUE_COLORS[value] if 0 <= value < len(VALUE_COLORS) else COLOR_GRAY
    return bg, "white", "normal"


def render_board(
    board: Sequence[int],
    width: int,
    goal: int,
    modulus: int,
    highlights: Optional[Iterable[int]] = None,
) -> str:
    """Board as a CSS grid; each cell shows its distance from the goal."""

    marked = set(highlights or ())
    rows = len(board) // width if width else 0
    cells: List[str] = []
    for idx, raw in enumerate(board):
        val = remap(raw, goal, modulus)
        bg, fg, weight = _colors(val, idx in marked)
        cls = "board-cell highlight" if idx in marked else "board-cell"
        cells.append(
            f'<div class="{cls}" data-idx="{idx}" '
            f'style="background-color:{bg};color:{fg};font-weight:{weight}">{val}</div>'
        )
    return (
        f'<div class="board-grid" style="display:grid;grid-template-columns:repeat({width}, 1fr);'
        f'grid-template-rows:repeat({rows}, 1fr);aspect-ratio:{width} / {rows}">'
        f'{"".join(cells)}</div>'
    )


def render_legend(cycle: Sequence[str], goal: int, modulus: int) -> str:
    items = []
    for raw in range(modulus):
        val = remap(raw, goal, modulus)
        bg, _, _ = _colors(val, False)
        label = escape(cycle[raw]) if raw < len(cycle) else str(raw)
        items.append(f"<li><span class='swatch' style='background:{bg}'></span>{val}: {label}</li>")
    return "".join(items)
