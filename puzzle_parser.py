# puzzle_parser.py — strict readers for the Day 12 and Day 08 inputs
import re
from typing import Dict, Iterable, List, Optional

from config import CFG
from models import CapacityError, Cell, Point, Puzzle, PuzzleInputError, Region, Shape
from shapes import empty_shape, make_shape

_INT = r"[+-]?\d+"
_REGION_RE = re.compile(rf"^\s*(?P<w>{_INT})x(?P<h>{_INT})\s*:(?P<counts>.*)$")
_HEADER_RE = re.compile(r"^\s*(?P<id>\d+)\s*:(?P<rest>.*)$")
_POINT_RE = re.compile(
    rf"^\s*(?P<x>{_INT})\s*,\s*(?P<y>{_INT})\s*,\s*(?P<z>{_INT})\s*$"
)

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


def decode_input(raw: bytes) -> str:
    """UTF-8 text of a raw upload or file; undecodable bytes are an input error."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PuzzleInputError(f"Input is not valid UTF-8 (byte offset {e.start})") from e


def _is_blank(line: str) -> bool:
    return not line.strip()


def _to_i64(tok: str, line: str) -> int:
    v = int(tok)
    if v < _I64_MIN or v > _I64_MAX:
        raise PuzzleInputError("Value outside signed 64-bit range", line)
    return v


def parse_region_line(line: str) -> Region:
    m = _REGION_RE.match(line)
    if not m:
        raise PuzzleInputError("Bad region line", line)
    W = int(m.group("w"))
    H = int(m.group("h"))
    if W <= 0 or H <= 0:
        raise PuzzleInputError("Bad region size", line)

    counts: List[int] = []
    for tok in m.group("counts").split():
        if not re.fullmatch(_INT, tok):
            raise PuzzleInputError("Bad region count", line)
        n = int(tok)
        if n < 0:
            raise PuzzleInputError("Negative region count", line)
        counts.append(n)
    if len(counts) > CFG.MAX_SHAPES:
        raise CapacityError(f"Region lists {len(counts)} counts (max {CFG.MAX_SHAPES}): '{line}'")
    return Region(W=W, H=H, counts=tuple(counts), line=line.strip())


def _glyph_cells(row: str, y: int, line: str) -> List[Cell]:
    cells: List[Cell] = []
    x = 0
    for ch in row:
        if ch == "#":
            cells.append((x, y))
            x += 1
        elif ch == ".":
            x += 1
        elif ch in " \t":
            continue
        else:
            raise PuzzleInputError(f"Invalid char in shape grid {ch!r}", line)
    return cells


class _ShapeBuilder:
    """Accumulates the glyph rows of the shape currently being read."""

    def __init__(self, shape_id: int, header: str):
        self.shape_id = shape_id
        self.header = header
        self.cells: List[Cell] = []
        self.rows = 0

    def add_row(self, row: str, line: str) -> None:
        cells = _glyph_cells(row, self.rows, line)
        if len(self.cells) + len(cells) > CFG.MAX_CELLS_PER_SHAPE:
            raise CapacityError(
                f"Shape {self.shape_id} has too many cells (max {CFG.MAX_CELLS_PER_SHAPE})"
            )
        self.cells.extend(cells)
        self.rows += 1

    def build(self) -> Shape:
        return make_shape(self.shape_id, self.cells, self.header)


def parse_shapes_and_regions(lines: Iterable[str]) -> Puzzle:
    """
    Read shape definitions and region specifications in any order.

    A shape starts at an ``<id>:`` header (glyphs may follow the colon on the
    same line) and runs until the next header-like line.  Ids missing from the
    input become empty placeholder shapes so shapes stay addressable by index.
    """
    by_id: Dict[int, Shape] = {}
    regions: List[Region] = []
    cur: Optional[_ShapeBuilder] = None

    def _commit() -> None:
        shape = cur.build()
        by_id[shape.id] = shape

    for raw in lines:
        line = raw.rstrip("\r\n")
        if _is_blank(line):
            continue

        if _REGION_RE.match(line):
            if cur is not None:
                _commit()
                cur = None
            if len(regions) >= CFG.MAX_REGIONS:
                raise CapacityError(f"Too many regions (max {CFG.MAX_REGIONS})")
            regions.append(parse_region_line(line))
            continue

        m = _HEADER_RE.match(line)
        if m:
            if cur is not None:
                _commit()
            shape_id = int(m.group("id"))
            if shape_id >= CFG.MAX_SHAPES:
                raise CapacityError(f"Shape id out of range: {shape_id} (max {CFG.MAX_SHAPES - 1})")
            if shape_id in by_id:
                raise PuzzleInputError(f"Duplicate shape id {shape_id}", line)
            cur = _ShapeBuilder(shape_id, line)
            rest = m.group("rest")
            if not _is_blank(rest):
                cur.add_row(rest, line)
            continue

        if cur is None:
            raise PuzzleInputError("Unexpected line before any shape header", line)
        cur.add_row(line, line)

    if cur is not None:
        _commit()

    if not by_id:
        raise PuzzleInputError("No shapes parsed")

    n = max(by_id) + 1
    shapes = tuple(by_id.get(i) or empty_shape(i) for i in range(n))
    return Puzzle(shapes=shapes, regions=tuple(regions))


def parse_points(lines: Iterable[str]) -> List[Point]:
    pts: List[Point] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if _is_blank(line):
            continue
        m = _POINT_RE.match(line)
        if not m:
            raise PuzzleInputError("Invalid coordinate line", line)
        if len(pts) >= CFG.MAX_POINTS:
            raise CapacityError(f"Too many points (>{CFG.MAX_POINTS})")
        pts.append(Point(
            _to_i64(m.group("x"), line),
            _to_i64(m.group("y"), line),
            _to_i64(m.group("z"), line),
        ))

    if not pts:
        raise PuzzleInputError("No points read")
    if len(pts) < 2:
        raise PuzzleInputError("Need at least two points")
    return pts


__all__ = ["decode_input", "parse_region_line", "parse_shapes_and_regions", "parse_points"]
