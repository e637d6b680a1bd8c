# shapes.py — polyomino canonical form and D4 orientation sets
from __future__ import annotations

from typing import Iterable, List, Tuple

from config import CFG
from models import Cell, CapacityError, Poly, PuzzleInputError, Shape


def normalize(cells: Iterable[Cell]) -> Poly:
    """Translate to the origin and sort by (y, x).

    The resulting ``Poly`` is the canonical form; two polyominoes are equal
    exactly when their canonical cell tuples are equal.
    """
    pts = list(cells)
    if not pts:
        return Poly(cells=(), w=0, h=0)
    min_x = min(x for x, _ in pts)
    min_y = min(y for _, y in pts)
    max_x = max(x for x, _ in pts)
    max_y = max(y for _, y in pts)
    moved = sorted(((x - min_x, y - min_y) for x, y in pts), key=lambda c: (c[1], c[0]))
    return Poly(cells=tuple(moved), w=max_x - min_x + 1, h=max_y - min_y + 1)


def rot90(poly: Poly) -> Poly:
    return normalize((y, -x) for x, y in poly.cells)


def flip_x(poly: Poly) -> Poly:
    return normalize((-x, y) for x, y in poly.cells)


def orientations(base: Poly) -> Tuple[Poly, ...]:
    """Distinct orientations in the fixed order r0..r3, f0..f3 (first wins)."""
    r0 = normalize(base.cells)
    f0 = flip_x(r0)
    candidates: List[Poly] = []
    for start in (r0, f0):
        cur = start
        for _ in range(4):
            candidates.append(cur)
            cur = rot90(cur)
    # dict preserves first-seen order
    return tuple(dict.fromkeys(candidates))


def make_shape(shape_id: int, cells: Iterable[Cell], line: str = "") -> Shape:
    pts = list(cells)
    if not pts:
        raise PuzzleInputError(f"Shape {shape_id} has no cells", line)
    if len(set(pts)) != len(pts):
        raise PuzzleInputError(f"Shape {shape_id} repeats a cell", line)
    if len(pts) > CFG.MAX_CELLS_PER_SHAPE:
        raise CapacityError(
            f"Shape {shape_id} has {len(pts)} cells (max {CFG.MAX_CELLS_PER_SHAPE})"
        )
    base = normalize(pts)
    return Shape(id=shape_id, base=base, orientations=orientations(base))


def empty_shape(shape_id: int) -> Shape:
    """Placeholder for an id missing from the input; it can only be demanded zero times."""
    empty = Poly(cells=(), w=0, h=0)
    return Shape(id=shape_id, base=empty, orientations=())


def checker_counts(poly: Poly) -> Tuple[int, int]:
    """(black, white) cells with (0, 0) black."""
    black = sum(1 for x, y in poly.cells if (x + y) % 2 == 0)
    return black, poly.area - black


def colour_imbalance(poly: Poly) -> int:
    black, white = checker_counts(poly)
    return abs(black - white)


__all__ = [
    "normalize",
    "rot90",
    "flip_x",
    "orientations",
    "make_shape",
    "empty_shape",
    "checker_counts",
    "colour_imbalance",
]
