# solver/cp_sat.py
import threading
from typing import List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import PuzzleModel, Step
from remap import remap
from solver.placements import all_origins


def _stop_when_cancelled(solver, cancel: threading.Event, finished: threading.Event) -> threading.Thread:
    stop = getattr(solver, "stop_search", None) or getattr(solver, "StopSearch")

    def _watch():
        while not finished.is_set():
            if cancel.wait(0.1):
                stop()
                return

    th = threading.Thread(target=_watch, daemon=True)
    th.start()
    return th


def solve_cp_sat(
    model: PuzzleModel,
    *,
    max_seconds: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> Tuple[Optional[List[Step]], str]:
    """Exact model: each shape once, each cell hit ``distance + modulus*k`` times."""

    mt = model.modulus
    origins = all_origins(model.shapes, model.width, model.height)
    if any(o.total == 0 for o in origins):
        return None, "A shape does not fit on the board"

    m = _cp.CpModel()
    p = [[m.NewBoolVar(f"p_{i}_{k}") for k in range(o.total)] for i, o in enumerate(origins)]
    for i in range(len(origins)):
        m.Add(sum(p[i]) == 1)

    covering: List[list] = [[] for _ in range(model.size)]
    for i, o in enumerate(origins):
        for k, cells in enumerate(o.cells):
            for c in cells:
                covering[c].append(p[i][k])

    for c, raw in enumerate(model.grid):
        need = remap(raw, model.goal, mt)
        if not covering[c]:
            if need:
                return None, "Proven infeasible under current constraints"
            continue
        laps = m.NewIntVar(0, len(covering[c]) // mt, f"laps_{c}")
        m.Add(sum(covering[c]) == need + mt * laps)

    solver = _cp.CpSolver()
    if max_seconds is not None:
        solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.num_search_workers = int(getattr(CFG, "WORKERS", 1))
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.log_search_progress = False

    finished = threading.Event()
    if cancel is not None:
        _stop_when_cancelled(solver, cancel, finished)
    try:
        res = solver.Solve(m)
    finally:
        finished.set()

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        steps: List[Step] = []
        for i, o in enumerate(origins):
            for k in range(o.total):
                if solver.BooleanValue(p[i][k]):
                    steps.append(o.step(k))
                    break
        steps.sort(key=lambda st: st.original_shape_id)
        return steps, "Solved"

    if cancel is not None and cancel.is_set():
        return None, "Cancelled"
    if res == _cp.INFEASIBLE:
        return None, "Proven infeasible under current constraints"
    if res == _cp.MODEL_INVALID:
        return None, "Model invalid (configuration error)"
    return None, "Stopped before solution (timebox)"
