# solver/backtrack.py
"""Depth-first placement search.

Cells are tracked as their distance to the goal (see :func:`remap.remap`);
placing a shape moves each covered cell one step closer, wrapping from 0 back
to ``modulus - 1``.  The number of wraps the whole run can afford is fixed by
the puzzle (total shape cells minus total distance, divided by the modulus),
which prunes most placements early.
"""

from __future__ import annotations

import threading
import time
from typing import List, Optional

from config import CFG
from models import PuzzleModel, Step
from remap import remap_grid
from solver.placements import ShapeOrigins, shape_origins


class SolverInputError(ValueError):
    pass


class _Slot:
    __slots__ = ("origins", "seq", "twin")

    def __init__(self, origins: ShapeOrigins, twin: Optional[int]):
        self.origins = origins
        self.seq = 0
        self.twin = twin


class BacktrackSolver:
    def __init__(self, model: PuzzleModel):
        if not model.shapes:
            raise SolverInputError("No shapes")
        self.model = model
        self.modulus = model.modulus
        self.mat: List[int] = remap_grid(model.grid, model.goal, self.modulus)
        self.iterations = 0

        # Largest shapes first: they have the fewest origins and fail fastest.
        ordered = sorted(model.shapes, key=lambda s: len(s.points), reverse=True)
        self.slots: List[_Slot] = []
        for shape in ordered:
            origins = shape_origins(shape, model.width, model.height)
            twin = None
            for idx, prev in enumerate(self.slots):
                if prev.origins.total == origins.total and prev.origins.cells[:1] == origins.cells[:1]:
                    twin = idx
                    break
            self.slots.append(_Slot(origins, twin))

        total_points = sum(len(s.points) for s in model.shapes)
        spare = total_points - sum(self.mat)
        # Placements only ever add hits, so the surplus must be whole laps.
        self.wraps = spare // self.modulus if spare >= 0 and spare % self.modulus == 0 else None

    def solve(
        self,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Optional[List[Step]]:
        """Return one step per shape, ordered by shape id, or ``None``."""

        if self.wraps is None:
            return None

        slots = self.slots
        mat = self.mat
        mt = self.modulus
        last = len(slots) - 1
        check_every = max(1, int(CFG.CANCEL_CHECK_EVERY))
        budget = [0] * (len(slots) + 1)
        budget[0] = self.wraps
        i = 0

        while True:
            self.iterations += 1
            if self.iterations % check_every == 0:
                if cancel is not None and cancel.is_set():
                    return None
                if deadline is not None and time.monotonic() > deadline:
                    return None

            slot = slots[i]
            placed = False
            for s in range(slot.seq, slot.origins.total):
                cells = slot.origins.cells[s]
                left = budget[i]
                for mi in cells:
                    if mat[mi] == 0:
                        left -= 1
                        if left < 0:
                            break
                if left < 0:
                    continue
                slot.seq = s
                budget[i + 1] = left
                for mi in cells:
                    mat[mi] = mat[mi] - 1 if mat[mi] else mt - 1
                placed = True
                break

            if placed:
                if i == last:
                    return self._steps()
                i += 1
                nxt = slots[i]
                nxt.seq = slots[nxt.twin].seq if nxt.twin is not None else 0
                continue

            if i == 0:
                return None
            i -= 1
            prev = slots[i]
            for mi in prev.origins.cells[prev.seq]:
                mat[mi] = mat[mi] + 1 if mat[mi] + 1 < mt else 0
            prev.seq += 1

    def _steps(self) -> List[Step]:
        steps = [slot.origins.step(slot.seq) for slot in self.slots]
        steps.sort(key=lambda st: st.original_shape_id)
        return steps
