# Orchestrator: picks a solving engine, times it and honours Stop requests
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from config import CFG
from models import PuzzleModel, Step
from progress import log_event, set_cancelled, set_engine, set_shape_count, set_status, set_step_count
from solver.backtrack import BacktrackSolver

# Set by cancel_solve(); cleared at the start of every run.
CANCEL_EVENT = threading.Event()

EngineResult = Tuple[Optional[List[Step]], str]


def _run_backtrack(model: PuzzleModel, cancel: threading.Event, max_seconds: Optional[float]) -> EngineResult:
    deadline = time.monotonic() + max_seconds if max_seconds else None
    solver = BacktrackSolver(model)
    steps = solver.solve(cancel=cancel, deadline=deadline)
    if steps:
        return steps, "Solved"
    if cancel.is_set():
        return None, "Cancelled"
    if deadline is not None and time.monotonic() > deadline:
        return None, "Stopped before solution (timebox)"
    return None, "No solution found"


def _run_cp_sat(model: PuzzleModel, cancel: threading.Event, max_seconds: Optional[float]) -> EngineResult:
    # ortools is only needed when this engine is picked.
    from solver.cp_sat import solve_cp_sat

    return solve_cp_sat(model, max_seconds=max_seconds, cancel=cancel)


ENGINES: Dict[str, Callable[[PuzzleModel, threading.Event, Optional[float]], EngineResult]] = {
    "backtrack": _run_backtrack,
    "cp_sat": _run_cp_sat,
}


def cancel_solve() -> None:
    CANCEL_EVENT.set()
    set_cancelled()


def run_solver(
    model: PuzzleModel,
    *,
    engine: Optional[str] = None,
    cancel: Optional[threading.Event] = None,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, List[Step], str]:
    """Solve ``model`` and return ``(ok, steps, reason)``."""

    name = (engine or CFG.SOLVER or "backtrack").strip().lower()
    runner = ENGINES.get(name)
    if runner is None:
        raise ValueError(f"Unknown solver engine {name!r} (expected one of {sorted(ENGINES)})")

    if cancel is None:
        cancel = CANCEL_EVENT
        cancel.clear()
    if max_seconds is None:
        max_seconds = float(CFG.SOLVE_SECONDS) or None

    set_engine(name)
    set_shape_count(len(model.shapes))
    set_status("Solving")
    log_event(
        "Solve started",
        engine=name,
        board=f"{model.width}x{model.height}",
        shapes=len(model.shapes),
        modulus=model.modulus,
        goal=model.goal,
    )

    t0 = time.monotonic()
    steps, reason = runner(model, cancel, max_seconds)
    elapsed = time.monotonic() - t0
    steps = list(steps or [])
    set_step_count(len(steps))
    log_event(
        "Solve returned",
        engine=name,
        steps=len(steps),
        duration=f"{elapsed:.2f}s",
        reason=reason,
    )
    return bool(steps), steps, reason


def solve_puzzle(
    model: PuzzleModel,
    *,
    engine: Optional[str] = None,
    cancel: Optional[threading.Event] = None,
    max_seconds: Optional[float] = None,
) -> Optional[List[Step]]:
    """Steps of a solution, or ``None`` when none was found or the run was stopped."""

    ok, steps, _reason = run_solver(model, engine=engine, cancel=cancel, max_seconds=max_seconds)
    return steps if ok else None


__all__ = ["CANCEL_EVENT", "ENGINES", "cancel_solve", "run_solver", "solve_puzzle"]
