from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Tuple

Cell = Tuple[int, int]  # (x, y)


class PuzzleInputError(ValueError):
    """Malformed puzzle text; carries the offending line when known."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(f"{message}: '{line}'" if line else message)
        self.line = line


class CapacityError(ValueError):
    """Input is well formed but exceeds one of the configured capacity caps."""


@dataclass(frozen=True)
class Poly:
    cells: Tuple[Cell, ...]
    w: int
    h: int

    @property
    def area(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class Shape:
    id: int
    base: Poly
    orientations: Tuple[Poly, ...]

    @property
    def area(self) -> int:
        return self.base.area


@dataclass(frozen=True)
class Region:
    W: int
    H: int
    counts: Tuple[int, ...]
    line: str = ""

    @property
    def board_area(self) -> int:
        return self.W * self.H

    def label(self) -> str:
        return f"{self.W}x{self.H}: " + " ".join(str(c) for c in self.counts)


@dataclass(frozen=True)
class Placed:
    shape_id: int
    orientation: int
    x: int
    y: int
    poly: Poly

    def board_cells(self) -> List[Cell]:
        return [(self.x + cx, self.y + cy) for cx, cy in self.poly.cells]


@dataclass
class RegionResult:
    region: Region
    ok: bool
    reason: str
    placed: List[Placed] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


class Point(NamedTuple):
    x: int
    y: int
    z: int


class Edge(NamedTuple):
    a: int
    b: int
    d2: int


@dataclass(frozen=True)
class Puzzle:
    shapes: Tuple[Shape, ...]
    regions: Tuple[Region, ...]
