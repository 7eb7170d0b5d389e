"""Replay solver steps over an extracted puzzle.

The model's grid is never touched: every board is rebuilt from a fresh copy,
so stepping backwards is just asking for a shorter prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from models import PuzzleModel, Shape, Step
from remap import remap_grid


def _shape_index(shapes: Iterable[Shape]) -> Dict[int, Shape]:
    index: Dict[int, Shape] = {}
    for shape in shapes:
        index.setdefault(shape.id, shape)
    return index


def step_cells(step: Step, shape: Shape, width: int, size: int) -> List[int]:
    """Absolute grid indices covered by ``shape`` at the step's origin, in bounds."""

    cells: List[int] = []
    for pt in shape.points:
        dx, dy = pt % width, pt // width
        idx = (step.placement_y + dy) * width + (step.placement_x + dx)
        if 0 <= idx < size:
            cells.append(idx)
    return cells


def apply_step(grid: List[int], step: Step, shapes: Iterable[Shape], width: int, modulus: int) -> List[int]:
    """Advance every cell the step covers by one position in the cycle.

    Unknown shape ids are a no-op.  ``grid`` is mutated and returned.
    """

    shape = _shape_index(shapes).get(step.original_shape_id)
    if shape is None:
        return grid
    for idx in step_cells(step, shape, width, len(grid)):
        grid[idx] = (grid[idx] + 1) % modulus
    return grid


def board_after(model: PuzzleModel, steps: Sequence[Step], up_to: int, modulus: Optional[int] = None) -> List[int]:
    """Board after applying ``steps[0..up_to]``; ``up_to=-1`` is the original grid."""

    mt = model.modulus if modulus is None else modulus
    board = list(model.grid)
    last = min(up_to, len(steps) - 1)
    for i in range(last + 1):
        apply_step(board, steps[i], model.shapes, model.width, mt)
    return board


def next_highlights(steps: Sequence[Step], current_index: int, model: PuzzleModel) -> Set[int]:
    """Cells the step after ``current_index`` will cover, or an empty set."""

    nxt = current_index + 1
    if not 0 <= nxt < len(steps):
        return set()
    step = steps[nxt]
    shape = _shape_index(model.shapes).get(step.original_shape_id)
    if shape is None:
        return set()
    return set(step_cells(step, shape, model.width, model.size))


def unknown_shape_ids(model: PuzzleModel, steps: Iterable[Step]) -> List[int]:
    known = {s.id for s in model.shapes}
    out: List[int] = []
    for step in steps:
        if step.original_shape_id not in known and step.original_shape_id not in out:
            out.append(step.original_shape_id)
    return out


@dataclass(frozen=True)
class ReplayFrame:
    index: int
    board: List[int]
    highlights: Set[int]
    display: List[int]

    def as_json(self) -> Dict[str, object]:
        return {
            "index": self.index,
            "board": list(self.board),
            "display": list(self.display),
            "highlights": sorted(self.highlights),
        }


class ReplaySession:
    """Cursor over a step list; ``index`` is the last applied step (-1 = none)."""

    def __init__(self, model: PuzzleModel, steps: Sequence[Step]):
        self.model = model
        self.steps = tuple(steps)
        self.index = -1

    def goto(self, index: int) -> int:
        self.index = max(-1, min(int(index), len(self.steps) - 1))
        return self.index

    def forward(self) -> int:
        return self.goto(self.index + 1)

    def back(self) -> int:
        return self.goto(self.index - 1)

    def toggle(self, step_index: int) -> int:
        # Unticking an applied step rewinds to just before it.
        if step_index <= self.index:
            return self.goto(step_index - 1)
        return self.goto(step_index)

    def board(self) -> List[int]:
        return board_after(self.model, self.steps, self.index)

    def highlights(self) -> Set[int]:
        return next_highlights(self.steps, self.index, self.model)

    def display(self) -> List[int]:
        return remap_grid(self.board(), self.model.goal, self.model.modulus)

    def frame(self) -> ReplayFrame:
        board = self.board()
        return ReplayFrame(
            index=self.index,
            board=board,
            highlights=self.highlights(),
            display=remap_grid(board, self.model.goal, self.model.modulus),
        )


__all__ = [
    "step_cells", "apply_step", "board_after", "next_highlights",
    "unknown_shape_ids", "ReplayFrame", "ReplaySession",
]
