# config.py
import os

# ======= Solver service =======
SOLVER               = os.getenv("SS_SOLVER", "backtrack").strip().lower()
SOLVE_SECONDS        = float(os.getenv("SS_SOLVE_SECONDS", "600"))
WORKERS              = int(os.getenv("SS_WORKERS", "1"))
MAX_MEMORY_MB        = int(os.getenv("SS_MAX_MEMORY_MB", "2048"))
RANDOM_SEED          = int(os.getenv("SS_RANDOM_SEED", "0"))

# The backtracking engine polls the cancel flag once per this many iterations.
CANCEL_CHECK_EVERY   = int(os.getenv("SS_CANCEL_CHECK_EVERY", "1024"))

# ======= Markup conventions =======
MARKER_FRAGMENT      = os.getenv("SS_MARKER_FRAGMENT", "square.gif")
SEPARATOR_FRAGMENT   = os.getenv("SS_SEPARATOR_FRAGMENT", "arrow.gif")
GOAL_MARKER          = os.getenv("SS_GOAL_MARKER", "GOAL")
SECTION_PADDING      = os.getenv("SS_SECTION_PADDING", "15")

# ======= Output names =======
STEPS_OUT  = os.getenv("SS_STEPS_OUT", "steps.txt")
BOARD_HTML = os.getenv("SS_BOARD_HTML", "board_view.html")


class CFG:
    SOLVER        = SOLVER
    SOLVE_SECONDS = SOLVE_SECONDS
    WORKERS       = WORKERS
    MAX_MEMORY_MB = MAX_MEMORY_MB
    RANDOM_SEED   = RANDOM_SEED

    CANCEL_CHECK_EVERY = CANCEL_CHECK_EVERY

    MARKER_FRAGMENT    = MARKER_FRAGMENT
    SEPARATOR_FRAGMENT = SEPARATOR_FRAGMENT
    GOAL_MARKER        = GOAL_MARKER
    SECTION_PADDING    = SECTION_PADDING

    STEPS_OUT  = STEPS_OUT
    BOARD_HTML = BOARD_HTML


__all__ = ["CFG"]
