"""Turn a saved Shapeshifter page into a :class:`models.PuzzleModel`.

Extraction runs in five stages, each failing fast with an
:class:`ExtractionError` subclass:

1. board dimensions from the page script (``gX = ..;`` / ``gY = ..;``)
2. cycle order from the row holding the GOAL cell
3. goal index from the image inside the GOAL cell
4. board grid from the centred board table (with a shape-based fallback)
5. shape catalogue from the ACTIVE SHAPE / NEXT SHAPES sections

Every stage is a plain function over a :mod:`markup_tree` element so it can
be tested on a hand-built tree.  Nothing is cached between calls.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import CFG
from markup_tree import (
    Element,
    closest,
    find_first,
    following_siblings,
    get_attr,
    has_attr_value,
    images,
    iter_elements,
    parse_markup,
    row_cells,
    table_rows,
    text_content,
)
from models import PuzzleModel, Shape

LOGGER = logging.getLogger("shapeshifter.extract")

UNKNOWN_SHAPE = "unknown"

_GX_RE = re.compile(r"gX\s*=\s*(\d+)\s*;")
_GY_RE = re.compile(r"gY\s*=\s*(\d+)\s*;")

# Element carrying the GOAL label in the cycle row.
LABEL_TAG = "small"

ACTIVE_HEADING = "ACTIVE SHAPE"
NEXT_HEADING = "NEXT SHAPE"   # also matches "NEXT SHAPES"


# ---------- errors ----------

class ExtractionError(Exception):
    """Base class for extraction failures; ``kind`` names the failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class MissingDimensions(ExtractionError):
    pass


class MissingCycle(ExtractionError):
    pass


class UnmappedGoal(ExtractionError):
    pass


class MissingBoard(ExtractionError):
    pass


class RowWidthMismatch(ExtractionError):
    pass


class MalformedShapeSection(ExtractionError):
    pass


# ---------- helpers ----------

def shape_identifier(src: Optional[str]) -> str:
    """Return the part of an image path between the last ``/`` and last ``_``."""

    src = src or ""
    slash = src.rfind("/")
    underscore = src.rfind("_")
    if slash != -1 and underscore != -1 and underscore > slash:
        return src[slash + 1:underscore]
    return UNKNOWN_SHAPE


def _src(img: Element) -> str:
    return get_attr(img, "src", "") or ""


def _is_separator(img: Element) -> bool:
    return CFG.SEPARATOR_FRAGMENT in _src(img)


def _is_marker(img: Element) -> bool:
    return CFG.MARKER_FRAGMENT in _src(img)


# ---------- stage 1: dimensions ----------

def read_dimensions(root: Element) -> Tuple[int, int]:
    gx = gy = 0
    for script in iter_elements(root, "script"):
        text = text_content(script)
        m = _GX_RE.search(text)
        if m:
            gx = int(m.group(1))
        m = _GY_RE.search(text)
        if m:
            gy = int(m.group(1))
        if gx and gy:
            break
    if not gx or not gy:
        raise MissingDimensions("Could not parse board dimensions from script.")
    return gx, gy


# ---------- stages 2 & 3: cycle order and goal ----------

def find_goal_cell(root: Element) -> Optional[Element]:
    label = find_first(root, LABEL_TAG, lambda n: CFG.GOAL_MARKER in text_content(n))
    return closest(label, "td") if label is not None else None


def read_cycle(root: Element) -> Tuple[Element, List[str]]:
    """Return the GOAL cell and the cycle order read from its row."""

    goal_cell = find_goal_cell(root)
    row = goal_cell.parent if goal_cell is not None else None
    if row is None or row.tag != "tr":
        raise MissingCycle("Cannot find GOAL cycle information.")

    order: List[str] = []
    for img in images(row):
        if _is_separator(img):
            continue
        ident = shape_identifier(_src(img))
        if ident != UNKNOWN_SHAPE and ident not in order:
            order.append(ident)

    if not order:
        raise MissingCycle("Could not determine the shape cycle from the GOAL row.")
    LOGGER.debug("cycle order: %s", order)
    return goal_cell, order


def read_goal(goal_cell: Element, mapping: Dict[str, int]) -> int:
    goal_img = next((img for img in images(goal_cell) if not _is_separator(img)), None)
    if goal_img is None:
        raise UnmappedGoal("Cannot find goal image.")
    ident = shape_identifier(_src(goal_img))
    if ident not in mapping:
        raise UnmappedGoal(f"Goal shape {ident!r} not in cycle order.")
    return mapping[ident]


# ---------- stage 4: board ----------

BoardSelector = Tuple[str, Callable[[Element, int, int], bool]]


def _centred_zero_padding(table: Element, width: int, height: int) -> bool:
    return (
        has_attr_value(table, "align", "center")
        and has_attr_value(table, "cellpadding", "0")
        and len(table_rows(table)) == height
    )


def _row_and_image_counts(table: Element, width: int, height: int) -> bool:
    rows = table_rows(table)
    return len(rows) == height and len(images(rows[0])) == width


# Evaluated in order; the first selector with a matching table wins.
BOARD_SELECTORS: Sequence[BoardSelector] = (
    ("primary", _centred_zero_padding),
    ("fallback", _row_and_image_counts),
)


def find_board(root: Element, width: int, height: int) -> Element:
    tables = list(iter_elements(root, "table"))
    for label, matches in BOARD_SELECTORS:
        for table in tables:
            if matches(table, width, height):
                if label != "primary":
                    LOGGER.warning("board table located by %s rule", label)
                return table
    raise MissingBoard(f"Expected {height} rows in board but found none matching.")


def read_grid(board: Element, width: int, height: int, mapping: Dict[str, int]) -> List[int]:
    rows = table_rows(board)
    grid: List[int] = []
    unmapped = 0
    for r in range(height):
        imgs = images(rows[r])
        if len(imgs) != width:
            raise RowWidthMismatch(
                f"Expected {width} columns in row {r} but found {len(imgs)}."
            )
        for img in imgs:
            ident = shape_identifier(_src(img))
            if ident not in mapping:
                unmapped += 1
            grid.append(mapping.get(ident, 0))
    if unmapped:
        LOGGER.warning("%d board image(s) not in cycle order; defaulted to 0", unmapped)
    return grid


# ---------- stage 5: shapes ----------

def _holds_heading(node: Element) -> bool:
    return any(
        heading in text_content(b)
        for b in iter_elements(node, "big")
        for heading in (ACTIVE_HEADING, NEXT_HEADING)
    )


def _section_tables(root: Element, heading_text: str) -> List[Element]:
    heading = next(
        (b for b in iter_elements(root, "big") if heading_text in text_content(b)),
        None,
    )
    if heading is None or heading.parent is None:
        return []
    # A section runs until the container of the next heading.
    padded: List[Element] = []
    for sib in following_siblings(heading.parent):
        if _holds_heading(sib):
            break
        if sib.tag == "table" and has_attr_value(sib, "cellpadding", CFG.SECTION_PADDING):
            padded.append(sib)
    return [
        t for outer in padded for t in iter_elements(outer, "table")
        if has_attr_value(t, "cellpadding", "0")
    ]


def shape_points(table: Element, board_width: int) -> Optional[Tuple[int, ...]]:
    """Occupied cells of a shape table as board-width offsets, or ``None``."""

    occupied: List[Tuple[int, int]] = []
    for y, row in enumerate(table_rows(table)):
        for x, cell in enumerate(row_cells(row)):
            if any(_is_marker(img) for img in images(cell)):
                occupied.append((x, y))
    if not occupied:
        return None
    min_x = min(x for x, _ in occupied)
    min_y = min(y for _, y in occupied)
    return tuple((y - min_y) * board_width + (x - min_x) for x, y in occupied)


def read_shapes(root: Element, board_width: int) -> List[Shape]:
    shapes: List[Shape] = []
    for heading in (ACTIVE_HEADING, NEXT_HEADING):
        for table in _section_tables(root, heading):
            points = shape_points(table, board_width)
            if points is None:
                continue
            shapes.append(Shape(id=len(shapes), points=points))
    return shapes


def require_shapes(model: PuzzleModel) -> PuzzleModel:
    """Reject a model with an empty shape catalogue (callers that must solve)."""

    if not model.shapes:
        raise MalformedShapeSection("No shapes found under ACTIVE SHAPE or NEXT SHAPES.")
    return model


# ---------- entry points ----------

def extract_tree(root: Element) -> PuzzleModel:
    width, height = read_dimensions(root)
    goal_cell, cycle = read_cycle(root)
    mapping = {ident: i for i, ident in enumerate(cycle)}
    goal = read_goal(goal_cell, mapping)
    board = find_board(root, width, height)
    grid = read_grid(board, width, height, mapping)
    shapes = read_shapes(root, width)
    LOGGER.debug(
        "extracted %dx%d board, goal=%d, %d value(s), %d shape(s)",
        width, height, goal, len(cycle), len(shapes),
    )
    return PuzzleModel(
        width=width,
        height=height,
        grid=tuple(grid),
        goal=goal,
        shapes=tuple(shapes),
        cycle=tuple(cycle),
    )


def extract(markup: str) -> PuzzleModel:
    return extract_tree(parse_markup(markup))


__all__ = [
    "ExtractionError", "MissingDimensions", "MissingCycle", "UnmappedGoal",
    "MissingBoard", "RowWidthMismatch", "MalformedShapeSection",
    "BOARD_SELECTORS", "shape_identifier", "read_dimensions", "read_cycle",
    "read_goal", "find_board", "read_grid", "shape_points", "read_shapes",
    "require_shapes", "extract_tree", "extract",
]
