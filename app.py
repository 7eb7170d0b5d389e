# app.py — paste a saved puzzle page, solve it, step through the placements
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, request, render_template, send_from_directory, jsonify, url_for

from config import CFG
from extractor import ExtractionError, extract, require_shapes
from io_files import format_step, write_board_view_html, write_steps
from models import PuzzleModel, Step
from render import render_board, render_legend
from replay import ReplaySession, unknown_shape_ids
from solver.orchestrator import cancel_solve, run_solver

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    fmt_elapsed,
    log_event,
    set_status, set_elapsed, set_done, set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_STEPS_FULL_PATH, STEPS_DIR, STEPS_FILENAME = _resolve_output_paths(CFG.STEPS_OUT, "steps.txt")
_BOARD_FULL_PATH, BOARD_DIR, BOARD_FILENAME = _resolve_output_paths(CFG.BOARD_HTML, "board_view.html")

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "status": "",
    "width": 0,
    "height": 0,
    "goal": 0,
    "modulus": 0,
    "steps": [],
    "active_index": -1,
    "board_html": "",
    "legend_html": "",
    "elapsed_str": "0.00s",
    "steps_filename": STEPS_FILENAME,
    "board_filename": BOARD_FILENAME,
}

# Replay cursor for the most recent solution.
SESSION: Optional[ReplaySession] = None

app = Flask(__name__, static_folder=None, template_folder="templates")


@app.after_request
def _no_cache_progress(resp):
    if request.path in ("/progress", "/replay") or request.path.startswith("/replay/"):
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return render_template("index.html", markup="", status="")


@app.route("/result/latest")
def result_latest():
    return render_template("result.html", **LAST_RESULT)


def _read_markup() -> str:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and isinstance(payload.get("markup"), str):
        return payload["markup"]
    return request.form.get("markup", "")


def _step_rows(steps: List[Step]) -> List[Dict[str, Any]]:
    return [
        {"index": i, "label": format_step(i, step), "x": step.placement_x, "y": step.placement_y}
        for i, step in enumerate(steps)
    ]


def _frame_html(session: ReplaySession) -> str:
    frame = session.frame()
    model = session.model
    return render_board(frame.board, model.width, model.goal, model.modulus, frame.highlights)


def _fail(status: str, t0: float) -> str:
    global SESSION
    SESSION = None
    set_done(False, reason=status)
    LAST_RESULT.update({
        "ok": False,
        "status": status,
        "width": 0, "height": 0, "goal": 0, "modulus": 0,
        "steps": [],
        "active_index": -1,
        "board_html": "",
        "legend_html": "",
        "elapsed_str": fmt_elapsed(time.time() - t0),
    })
    set_result_url(url_for("result_latest"))
    return render_template("result.html", **LAST_RESULT)


def _solved_status(steps: List[Step], seconds: float) -> str:
    return f"Found solution in {len(steps)} step(s) with elapsed time of {fmt_elapsed(seconds)}."


@app.route("/solve", methods=["POST"])
def solve():
    global SESSION
    progress_reset()
    progress_start()
    set_status("Parsing")
    t0 = time.time()

    try:
        model: PuzzleModel = require_shapes(extract(_read_markup()))
    except ExtractionError as e:
        log_event("Extraction failed", kind=e.kind, message=e.message)
        return _fail(f"Error: {e}", t0)

    try:
        ok, steps, reason = run_solver(model)
    except Exception as e:
        return _fail(f"Error: solver exception: {type(e).__name__}: {e}", t0)

    elapsed = time.time() - t0
    set_elapsed(elapsed)
    if not ok:
        return _fail(f"No solution found or operation cancelled. ({reason})", t0)

    stale = unknown_shape_ids(model, steps)
    if stale:
        log_event("Steps reference unknown shapes", ids=",".join(str(i) for i in stale))

    status = _solved_status(steps, elapsed)
    set_done(True, reason=status)

    SESSION = ReplaySession(model, steps)
    board_html = _frame_html(SESSION)
    legend_html = render_legend(model.cycle, model.goal, model.modulus)

    steps_name = STEPS_FILENAME
    board_name = BOARD_FILENAME
    try:
        steps_name = os.path.basename(write_steps(steps, BASE_DIR)) or STEPS_FILENAME
        board_name = os.path.basename(
            write_board_view_html(board_html, legend_html, BASE_DIR, caption=status)
        ) or BOARD_FILENAME
    except OSError as e:
        log_event("Output write failed", error=f"{type(e).__name__}: {e}")

    LAST_RESULT.update({
        "ok": True,
        "status": status,
        "width": model.width,
        "height": model.height,
        "goal": model.goal,
        "modulus": model.modulus,
        "steps": _step_rows(steps),
        "active_index": SESSION.index,
        "board_html": board_html,
        "legend_html": legend_html,
        "elapsed_str": fmt_elapsed(elapsed),
        "steps_filename": steps_name,
        "board_filename": board_name,
    })
    set_result_url(url_for("result_latest"))
    return render_template("result.html", **LAST_RESULT)


@app.route("/cancel", methods=["POST"])
def cancel():
    cancel_solve()
    return jsonify({"ok": True, "status": "Stopping..."})


@app.route("/replay/<int(signed=True):index>")
def replay(index: int):
    session = SESSION
    if session is None:
        return jsonify({"error": "no solution loaded"}), 404
    session.goto(index)
    frame = session.frame()
    LAST_RESULT["active_index"] = frame.index
    LAST_RESULT["board_html"] = _frame_html(session)
    body = frame.as_json()
    body["board_html"] = LAST_RESULT["board_html"]
    body["steps"] = len(session.steps)
    return jsonify(body)


@app.route("/download/steps")
def download_steps():
    return send_from_directory(STEPS_DIR, STEPS_FILENAME, as_attachment=True)


@app.route("/download/html")
def download_html():
    return send_from_directory(BOARD_DIR, BOARD_FILENAME, as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False, threaded=True)
