import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from solver.placements import PlacementList, placement_cells


class CpSatUndecided(RuntimeError):
    """CP-SAT stopped (time box, memory cap) without proving either outcome."""


def try_pack_region(
    W: int,
    H: int,
    placements: Sequence[Optional[PlacementList]],
    need: Sequence[int],
    allow_gaps: bool = False,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, List[Tuple[int, int]], Optional[str]]:
    """Exact-cover model; if allow_gaps=True, packing model (≤ 1 per cell).

    Returns ``(ok, [(type, placement_index), ...], reason)``.  Copies of one
    shape share a single boolean per placement with a cardinality constraint,
    so identical pieces are never told apart and need no symmetry breaking.
    """
    m = _cp.CpModel()
    chosen: Dict[int, List[Tuple[int, _cp.IntVar]]] = {}
    cell_vars: Dict[int, List[_cp.IntVar]] = defaultdict(list)

    for t, n in enumerate(need):
        if n <= 0:
            continue
        pl = placements[t]
        if pl is None or len(pl) < n:
            return False, [], f"Shape {t} has fewer placements than copies demanded"
        bools = [m.new_bool_var(f"p_{t}_{i}") for i in range(len(pl))]
        m.add(sum(bools) == int(n))
        chosen[t] = list(enumerate(bools))

        rows, cells = placement_cells(pl.masks)
        for r, c in zip(rows.tolist(), cells.tolist()):
            cell_vars[c].append(bools[r])

    for cell in range(W * H):
        vars_here = cell_vars.get(cell)
        if not vars_here:
            if not allow_gaps:
                return False, [], f"Cell {cell} cannot be covered by any placement"
            continue
        if allow_gaps:
            m.add_at_most_one(vars_here)
        else:
            m.add_exactly_one(vars_here)

    solver = _cp.CpSolver()
    seconds = CFG.CPSAT_MAX_SECONDS if max_seconds is None else max_seconds
    solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.max_memory_in_mb = int(CFG.MAX_MEMORY_MB)
    solver.parameters.num_workers = max(1, int(CFG.WORKERS))
    solver.parameters.log_search_progress = False

    t0 = time.time()
    status = solver.solve(m)
    elapsed = time.time() - t0

    if status in (_cp.OPTIMAL, _cp.FEASIBLE):
        picked = [
            (t, i)
            for t, pairs in chosen.items()
            for i, var in pairs
            if solver.value(var)
        ]
        return True, picked, None
    if status == _cp.INFEASIBLE:
        return False, [], "Proven infeasible"
    raise CpSatUndecided(
        f"CP-SAT returned {solver.status_name(status)} after {elapsed:.2f}s on a {W}x{H} board"
    )


__all__ = ["CpSatUndecided", "try_pack_region"]
