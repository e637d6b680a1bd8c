# solver/mst.py — Kruskal over the dense squared-distance edge list (Day 08)
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

import progress
from config import CFG
from models import CapacityError, Edge, Point, PuzzleInputError

log = logging.getLogger(__name__)

U64_MASK = (1 << 64) - 1


class UnionFind:
    """Disjoint sets with union by size and full path compression."""

    def __init__(self, n: int):
        self.parent = list(range(n))
        self.size = [1] * n
        self.components = n

    def find(self, x: int) -> int:
        root = x
        parent = self.parent
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union_roots(self, rx: int, ry: int) -> bool:
        if rx == ry:
            return False
        if self.size[rx] < self.size[ry]:
            rx, ry = ry, rx
        self.parent[ry] = rx
        self.size[rx] += self.size[ry]
        self.components -= 1
        return True

    def union(self, x: int, y: int) -> bool:
        return self.union_roots(self.find(x), self.find(y))

    def root_sizes(self) -> List[int]:
        return [self.size[i] for i, p in enumerate(self.parent) if p == i]


@dataclass
class EdgeList:
    """Edges as parallel arrays, already sorted by (d2, a, b)."""

    d2: np.ndarray
    a: np.ndarray
    b: np.ndarray

    def __len__(self) -> int:
        return int(self.d2.shape[0])

    def __iter__(self) -> Iterator[Edge]:
        for a, b, d2 in zip(self.a.tolist(), self.b.tolist(), self.d2.tolist()):
            yield Edge(a, b, d2)

    def pairs(self, limit: int = -1) -> Iterator[Tuple[int, int]]:
        stop = len(self) if limit < 0 else min(limit, len(self))
        return zip(self.a[:stop].tolist(), self.b[:stop].tolist())


def build_edges(points: Sequence[Point]) -> EdgeList:
    """
    All C(n, 2) pairs with their squared Euclidean distance.

    Distances use unsigned 64-bit arithmetic with wrap-around, and ties are
    broken by (a, b) so every downstream answer is deterministic.
    """
    n = len(points)
    count = n * (n - 1) // 2
    if count > CFG.MAX_EDGES:
        raise CapacityError(f"Too many edges ({count}, max {CFG.MAX_EDGES})")

    coords = np.array(points, dtype=np.int64).reshape(n, 3)
    a, b = np.triu_indices(n, k=1)
    with np.errstate(over="ignore"):
        diff = (coords[a] - coords[b]).astype(np.uint64)
        d2 = (diff * diff).sum(axis=1, dtype=np.uint64)
    order = np.lexsort((b, a, d2))
    return EdgeList(d2=d2[order], a=a[order], b=b[order])


def part1(edges: EdgeList, n: int, k: int) -> int:
    """Product of the three largest components after the first ``k`` edges."""
    uf = UnionFind(n)
    for a, b in edges.pairs(k):
        uf.union(a, b)
    top = sorted(uf.root_sizes(), reverse=True)[:3]
    top += [0] * (3 - len(top))
    return (top[0] * top[1] * top[2]) & U64_MASK


def part2(edges: EdgeList, points: Sequence[Point]) -> Tuple[int, UnionFind]:
    """x-coordinate product of the edge that joins the last two components."""
    n = len(points)
    uf = UnionFind(n)
    last_a = last_b = -1
    for a, b in edges.pairs():
        if uf.union(a, b):
            last_a, last_b = a, b
            if uf.components == 1:
                break
    if uf.components != 1:
        return 0, uf
    return (points[last_a].x * points[last_b].x) & U64_MASK, uf


def solve_day08(points: Sequence[Point], k: Optional[int] = None) -> Tuple[int, int]:
    if len(points) < 2:
        raise PuzzleInputError("Need at least two points")
    k = CFG.MST_PART1_EDGES if k is None else int(k)
    progress.update(status="Solving", day="day08")
    edges = build_edges(points)
    log.info("day08: %d points, %d edges", len(points), len(edges))
    p1 = part1(edges, len(points), k)
    p2, uf = part2(edges, points)
    progress.log_event("MST result", points=len(points), edges=len(edges), part1_edges=k,
                       components=uf.components, part1=p1, part2=p2)
    return p1, p2


__all__ = ["U64_MASK", "UnionFind", "EdgeList", "build_edges", "part1", "part2", "solve_day08"]
