from __future__ import annotations

import json
import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Thread-safe global solve state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _state_file_path() -> Path:
    configured = os.environ.get("PROGRESS_STATE_FILE")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "progress_state.json"


STATE_FILE = _state_file_path()
STATE_FILE_TMP = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
_LAST_STATE_MTIME: float = 0.0


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("shapeshifter.solve_log")
    if logger.handlers:
        return logger

    log_path = Path(__file__).resolve().parent / "logs" / "solve_runs.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except Exception:
        # No log file is not a reason to stop solving.
        logger.handlers.clear()
    return logger


RUN_LOGGER = _init_logger()


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except Exception:
        return None


def log_event(event: str, **fields: Any) -> None:
    if not RUN_LOGGER.handlers:
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    try:
        if extras:
            RUN_LOGGER.info("%s | %s", event, " ".join(extras))
        else:
            RUN_LOGGER.info("%s", event)
    except Exception:
        pass


# Single source of truth for the status line
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Parsing | Solving | Stopping | Solved | Error
    "engine": "",              # backtrack | cp_sat
    "shapes": 0,               # shapes handed to the solver
    "steps": 0,                # steps in the returned solution
    "elapsed_start": None,     # t0 (float) when solving started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",             # status text shown to the user
    "done": False,             # run completed
    "ok": None,                # success flag if known
    "cancelled": False,        # stop was requested
    "result_url": "",          # optional navigation target
    "run_id": 0,               # monotonically increasing identifier
}


def _persist_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        with STATE_FILE_TMP.open("w", encoding="utf-8") as fh:
            json.dump(PROGRESS, fh, ensure_ascii=False, separators=(",", ":"))
        STATE_FILE_TMP.replace(STATE_FILE)
        try:
            _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
        except OSError:
            _LAST_STATE_MTIME = time.time()
    except Exception:
        pass


def _load_persisted_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        stat = STATE_FILE.stat()
    except OSError:
        return
    if stat.st_mtime <= _LAST_STATE_MTIME:
        return
    try:
        with STATE_FILE.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except Exception:
        return
    if not isinstance(data, dict):
        return
    for key in PROGRESS.keys():
        if key in data:
            PROGRESS[key] = data[key]
    _LAST_STATE_MTIME = stat.st_mtime


def _now() -> float:
    return time.time()


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None and not PROGRESS.get("done"):
        PROGRESS["elapsed"] = _now() - float(t0)


def reset() -> None:
    with PROGRESS_LOCK:
        try:
            current_run_id = int(PROGRESS.get("run_id", 0))
        except Exception:
            current_run_id = 0
        PROGRESS.update({
            "status": "Idle",
            "engine": "",
            "shapes": 0,
            "steps": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "cancelled": False,
            "result_url": "",
            "run_id": current_run_id + 1,
        })
        log_event("Progress reset", run=PROGRESS["run_id"])
        _persist_locked()


def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
        _persist_locked()


# ------------------------------
# Setters
# ------------------------------

def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = "" if v is None else str(v)
        _touch_elapsed_locked()
        _persist_locked()


def set_engine(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["engine"] = "" if v is None else str(v)
        _persist_locked()


def set_shape_count(n: Any) -> None:
    try:
        i = int(n)
    except Exception:
        i = 0
    with PROGRESS_LOCK:
        PROGRESS["shapes"] = max(0, i)
        _persist_locked()


def set_step_count(n: Any) -> None:
    try:
        i = int(n)
    except Exception:
        i = 0
    with PROGRESS_LOCK:
        PROGRESS["steps"] = max(0, i)
        _persist_locked()


def set_elapsed(seconds: Any) -> None:
    try:
        f = float(seconds)
    except Exception:
        f = 0.0
    with PROGRESS_LOCK:
        PROGRESS["elapsed"] = max(0.0, f)
        _persist_locked()


def set_cancelled() -> None:
    with PROGRESS_LOCK:
        PROGRESS["cancelled"] = True
        if not PROGRESS.get("done"):
            PROGRESS["status"] = "Stopping"
        log_event("Stop requested", run=PROGRESS.get("run_id"))
        _persist_locked()


def set_result_url(url: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["result_url"] = "" if url is None else str(url)
        _persist_locked()


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``Solved``/``Error``); ``reason`` becomes
    the status message.  Called without arguments the run is considered
    solved.
    """

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        ok_flag = True if ok is None else bool(ok)
        PROGRESS["status"] = "Solved" if ok_flag else "Error"
        PROGRESS["ok"] = ok_flag
        PROGRESS["done"] = True
        if reason is not None:
            PROGRESS["message"] = str(reason)
        log_event(
            "Run finished",
            run=PROGRESS.get("run_id"),
            status=PROGRESS["status"],
            engine=PROGRESS.get("engine"),
            shapes=PROGRESS.get("shapes"),
            steps=PROGRESS.get("steps"),
            cancelled=PROGRESS.get("cancelled") or None,
            duration=_fmt_seconds(PROGRESS.get("elapsed")),
            message=PROGRESS.get("message"),
        )
        _persist_locked()


# ------------------------------
# Readers
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _load_persisted_locked()
        _touch_elapsed_locked()
        return dict(PROGRESS)


def as_json() -> Dict[str, Any]:
    snap = snapshot()
    snap["elapsed_str"] = fmt_elapsed(snap.get("elapsed") or 0.0)
    return snap


def fmt_elapsed(seconds: float) -> str:
    return f"{max(0.0, float(seconds)):.2f}s"


__all__ = [
    "PROGRESS", "PROGRESS_LOCK", "reset", "start_timer", "log_event",
    "set_status", "set_engine", "set_shape_count", "set_step_count",
    "set_elapsed", "set_cancelled", "set_result_url",
    "set_done", "snapshot", "as_json", "fmt_elapsed",
]
