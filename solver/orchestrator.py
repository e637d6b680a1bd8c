# Orchestrator: per-region pipeline (area checks → parity → placements → search)
from __future__ import annotations

import logging
import time
from typing import Iterable, List, Optional, Sequence, Tuple

from config import CFG
from models import Puzzle, PuzzleInputError, Region, RegionResult, Shape
import progress
from puzzle_parser import parse_shapes_and_regions
from solver.cp_sat import try_pack_region
from solver.exact_cover import SearchContext
from solver.parity import parity_possible
from solver.placements import PlacementList, board_words, build_placements, fits_somewhere

log = logging.getLogger(__name__)

BACKENDS = ("dfs", "cpsat")


# ---------- helpers ----------

def _demand(shapes: Sequence[Shape], region: Region) -> List[int]:
    """Dense need vector; missing trailing counts are zero."""
    need = [0] * len(shapes)
    for i, c in enumerate(region.counts):
        if c <= 0:
            continue
        if i >= len(shapes) or shapes[i].area == 0:
            raise PuzzleInputError(f"Region demands undefined shape {i}", region.line)
        need[i] = int(c)
    return need


def _resolve_backend(backend: Optional[str]) -> str:
    name = (backend or CFG.BACKEND or "dfs").strip().lower()
    if name not in BACKENDS:
        raise ValueError(f"Unknown backend {name!r} (expected one of {', '.join(BACKENDS)})")
    return name


def _infeasible(region: Region, reason: str, meta) -> RegionResult:
    return RegionResult(region=region, ok=False, reason=reason, meta=meta)


# ---------- public entrypoints ----------

def solve_region(
    shapes: Sequence[Shape],
    region: Region,
    *,
    allow_gaps: Optional[bool] = None,
    backend: Optional[str] = None,
    use_parity: Optional[bool] = None,
) -> RegionResult:
    """
    Decide whether ``region``'s demand can be placed on its board.

    Exact mode (the default) also requires every board cell to be covered;
    ``allow_gaps`` only requires every demanded piece to fit without overlap.
    Logical infeasibility is a normal ``ok=False`` result, never an exception.
    """
    gaps = CFG.ALLOW_GAPS if allow_gaps is None else bool(allow_gaps)
    parity = CFG.PARITY_PRUNE if use_parity is None else bool(use_parity)
    engine = _resolve_backend(backend)

    W, H = region.W, region.H
    need = _demand(shapes, region)
    area_sum = sum(shapes[i].area * n for i, n in enumerate(need))
    board = region.board_area
    meta = {
        "area_sum": area_sum,
        "board_area": board,
        "allow_gaps": gaps,
        "backend": engine,
    }

    if area_sum == 0:
        return RegionResult(region=region, ok=True, reason="Empty demand", meta=meta)
    if area_sum > board:
        return _infeasible(region, "Demand area exceeds board", meta)
    if not gaps and area_sum != board:
        return _infeasible(region, "Demand area does not cover board exactly", meta)

    nwords = board_words(W, H)

    if parity and not parity_possible(shapes, need, W, H, area_sum):
        meta["pruned_by"] = "parity"
        return _infeasible(region, "Checkerboard parity rules out the demand", meta)

    placements: List[Optional[PlacementList]] = [None] * len(shapes)
    for i, n in enumerate(need):
        if n <= 0:
            continue
        if not fits_somewhere(shapes[i], W, H):
            return _infeasible(region, f"Shape {i} does not fit the board in any orientation", meta)
        pl = build_placements(shapes[i], W, H, nwords)
        if len(pl) == 0:
            return _infeasible(region, f"Shape {i} has no placements", meta)
        placements[i] = pl
    meta["placements"] = sum(len(pl) for pl in placements if pl is not None)

    t0 = time.time()
    if engine == "cpsat":
        ok, picked, reason = try_pack_region(W, H, placements, need, allow_gaps=gaps)
        placed = [placements[t].placed(i) for t, i in picked]
    else:
        ctx = SearchContext(W, H, placements, need)
        ok = ctx.search()
        placed = ctx.solution_placed() if ok else []
        reason = None
        meta["nodes"] = ctx.nodes
    meta["search_sec"] = round(time.time() - t0, 6)

    if ok:
        return RegionResult(region=region, ok=True, reason="Tiled", placed=placed, meta=meta)
    return _infeasible(region, reason or "Search exhausted", meta)


def solve_puzzle(
    puzzle: Puzzle,
    *,
    allow_gaps: Optional[bool] = None,
    backend: Optional[str] = None,
    use_parity: Optional[bool] = None,
) -> Tuple[int, List[RegionResult]]:
    """Solve every region in input order; returns (tileable count, results)."""
    t0 = time.time()
    total = len(puzzle.regions)

    progress.update(status="Solving", day="day12", regions_total=total)
    progress.log_event(
        "Run setup",
        shapes=len(puzzle.shapes),
        regions=total,
        allow_gaps=int(CFG.ALLOW_GAPS if allow_gaps is None else bool(allow_gaps)),
        backend=_resolve_backend(backend),
    )

    results: List[RegionResult] = []
    solved = 0
    for idx, region in enumerate(puzzle.regions):
        progress.update(region=f"#{idx + 1} {region.label()}", board=f"{region.W} × {region.H}")
        res = solve_region(
            puzzle.shapes, region,
            allow_gaps=allow_gaps, backend=backend, use_parity=use_parity,
        )
        results.append(res)
        if res.ok:
            solved += 1
        progress.log_event(
            "Region result",
            region=region.label(),
            ok=int(res.ok),
            reason=res.reason,
            nodes=res.meta.get("nodes"),
            search_sec=res.meta.get("search_sec"),
        )
        progress.update(regions_done=idx + 1, solved=solved, percent=100.0 * (idx + 1) / total)

    progress.update(region="", elapsed=time.time() - t0)
    log.info("day12: %d of %d regions tileable", solved, total)
    return solved, results


def solve_day12(
    lines: Iterable[str],
    **kwargs,
) -> Tuple[int, List[RegionResult]]:
    return solve_puzzle(parse_shapes_and_regions(lines), **kwargs)


__all__ = ["BACKENDS", "solve_region", "solve_puzzle", "solve_day12"]
