"""Helpers for writing solve results to disk."""

from __future__ import annotations

import os
from html import escape
from typing import Sequence

from config import CFG
from models import Step

BOARD_VIEW_CSS = """
  .board-grid { display: grid; width: 32em; gap: 2px; }
  .board-cell { display: flex; align-items: center; justify-content: center; min-height: 2em; }
  .swatch { display: inline-block; width: 1em; height: 1em; margin-right: .4em; }
"""


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def format_step(index: int, step: Step) -> str:
    return (
        f"Step {index + 1:02d}: Row {step.placement_y}, Col {step.placement_x}"
        f" (shape {step.original_shape_id})"
    )


def write_steps(steps: Sequence[Step], base_dir: str) -> str:
    """Write the step list to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.STEPS_OUT, "steps.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not steps:
            f.write("No solution\n")
        else:
            for i, step in enumerate(steps):
                f.write(format_step(i, step) + "\n")
    return path


def write_board_view_html(board_html: str, legend_html: str, base_dir: str, *, caption: str = "") -> str:
    """Write the rendered board and legend to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.BOARD_HTML, "board_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Board View</title>
<style>{BOARD_VIEW_CSS}</style></head>
<body>
<h1>Board View</h1>
<p>{escape(caption)}</p>
<section class='card'>{board_html}</section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["format_step", "write_steps", "write_board_view_html"]
