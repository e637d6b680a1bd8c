import pytest

from config import CFG
from models import CapacityError, Point, PuzzleInputError
from puzzle_parser import decode_input, parse_points, parse_region_line, parse_shapes_and_regions


SAMPLE = """\
0:
#.
##

1: ##

2x2: 1 0
3x3: 0 2
"""


def _parse(text):
    return parse_shapes_and_regions(text.splitlines())


def test_parse_shapes_and_regions():
    puzzle = _parse(SAMPLE)
    assert [s.id for s in puzzle.shapes] == [0, 1]
    assert puzzle.shapes[0].base.cells == ((0, 0), (0, 1), (1, 1))
    assert puzzle.shapes[1].base.cells == ((0, 0), (1, 0))
    assert [(r.W, r.H, r.counts) for r in puzzle.regions] == [(2, 2, (1, 0)), (3, 3, (0, 2))]
    assert puzzle.regions[1].label() == "3x3: 0 2"


def test_regions_may_precede_shapes():
    puzzle = _parse("4x1: 2\n0:\n##\n")
    assert puzzle.regions[0].counts == (2,)
    assert puzzle.shapes[0].area == 2


def test_region_line_closes_open_shape():
    puzzle = _parse("0:\n##\n2x1: 1\n1:\n#\n")
    assert puzzle.shapes[0].area == 2
    assert puzzle.shapes[1].area == 1


def test_missing_ids_become_empty_shapes():
    puzzle = _parse("2: #\n1x1: 0 0 1\n")
    assert len(puzzle.shapes) == 3
    assert puzzle.shapes[0].area == 0
    assert puzzle.shapes[0].orientations == ()
    assert puzzle.shapes[2].area == 1


def test_spaces_inside_glyph_rows_are_ignored():
    puzzle = _parse("0:\n# #\n")
    assert puzzle.shapes[0].base.cells == ((0, 0), (1, 0))


@pytest.mark.parametrize(
    "text",
    [
        "0:\n#x\n",                 # invalid glyph
        "0: #\n0: ##\n",            # duplicate id
        "#.\n0: #\n",               # glyphs before any header
        "0:\n\n1x1: 1\n",           # empty shape
        "0: #\n0x3: 1\n",           # zero width
        "0: #\n2x2: -1\n",          # negative count
        "0: #\n2x2: 1 a\n",         # non-integer count
        "",                         # no shapes at all
    ],
)
def test_malformed_input_raises(text):
    with pytest.raises(PuzzleInputError):
        _parse(text)


def test_error_carries_offending_line():
    with pytest.raises(PuzzleInputError) as ei:
        _parse("0: #\n2x2: 1 a\n")
    assert ei.value.line == "2x2: 1 a"
    assert "2x2: 1 a" in str(ei.value)


def test_shape_id_capacity(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_SHAPES", 2)
    with pytest.raises(CapacityError):
        _parse("2: #\n")


def test_region_capacity(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_REGIONS", 1)
    with pytest.raises(CapacityError):
        _parse("0: #\n1x1: 1\n1x1: 1\n")


def test_cells_per_shape_capacity(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_CELLS_PER_SHAPE", 3)
    with pytest.raises(CapacityError):
        _parse("0:\n##\n##\n")


def test_parse_region_line_tolerates_whitespace():
    region = parse_region_line("  12x5 :  1 0  1 ")
    assert (region.W, region.H, region.counts) == (12, 5, (1, 0, 1))


def test_parse_points():
    pts = parse_points(["1,2,3", "", " -4 , 5 ,6 "])
    assert pts == [Point(1, 2, 3), Point(-4, 5, 6)]


@pytest.mark.parametrize(
    "lines",
    [
        [],
        ["1,2,3"],
        ["1,2", "3,4,5"],
        ["1,2,3", "9223372036854775808,0,0"],
    ],
)
def test_parse_points_rejects_bad_input(lines):
    with pytest.raises(PuzzleInputError):
        parse_points(lines)


def test_point_capacity(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_POINTS", 2)
    with pytest.raises(CapacityError):
        parse_points(["0,0,0", "1,0,0", "2,0,0"])


def test_decode_input():
    assert decode_input("0: #\n\n1x1: 1\n".encode("utf-8")) == "0: #\n\n1x1: 1\n"
    with pytest.raises(PuzzleInputError, match="not valid UTF-8"):
        decode_input(b"0: #\n\n1x1: \xff1\n")
