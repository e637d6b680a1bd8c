"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List

from config import CFG
from models import RegionResult
from render import render_ascii


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def layout_lines(results: List[RegionResult]) -> List[str]:
    """Text layout of every region: a verdict line, then the board if solved."""

    out: List[str] = []
    for idx, res in enumerate(results):
        verdict = "tileable" if res.ok else f"infeasible ({res.reason})"
        out.append(f"#{idx + 1} {res.region.label()} -> {verdict}")
        if res.ok and res.placed:
            out.extend(render_ascii(res.placed, res.region.W, res.region.H))
        out.append("")
    return out


def write_layout(results: List[RegionResult], base_dir: str) -> str:
    """Write the per-region text layout to the configured file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_OUT, "layout.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not results:
            f.write("No regions\n")
        else:
            f.write("\n".join(layout_lines(results)))
    return path


__all__ = ["layout_lines", "write_layout"]
