import pytest

pytest.importorskip("ortools")

import progress
from config import CFG
from models import CapacityError, PuzzleInputError
from puzzle_parser import parse_shapes_and_regions
from solver import orchestrator
from solver.orchestrator import solve_day12, solve_region


MONOMINO_1X1 = "0: #\n\n1x1: 1\n"
DOMINOES_2X2 = "0: ##\n\n2x2: 2\n"
L_TROMINO_2X2 = "0:\n#.\n##\n\n2x2: 1\n"
MIXED_2X2 = "0: #\n1: ##\n\n2x2: 2 1\n"
DOMINOES_3X3 = "0: ##\n\n3x3: 4\n"

# X pentomino plus two dominoes: area 9 on 3x3, blocked by colouring
X_AND_DOMINOES = "0:\n.#.\n###\n.#.\n1: ##\n\n3x3: 1 2\n"


def _count(text, **kwargs):
    count, _results = solve_day12(text.splitlines(), **kwargs)
    return count


@pytest.mark.parametrize(
    "text, expected",
    [(MONOMINO_1X1, 1), (DOMINOES_2X2, 1), (L_TROMINO_2X2, 0), (MIXED_2X2, 1), (DOMINOES_3X3, 0)],
)
def test_small_boards(text, expected):
    assert _count(text) == expected


def test_multiple_regions_are_counted_in_order():
    text = "0: ##\n\n2x2: 2\n2x2: 1\n2x3: 3\n3x3: 4\n"
    count, results = solve_day12(text.splitlines())
    assert count == 2
    assert [r.ok for r in results] == [True, False, True, False]
    assert [r.region.label() for r in results] == ["2x2: 2", "2x2: 1", "2x3: 3", "3x3: 4"]


def test_solution_covers_the_board_exactly():
    _count_, results = solve_day12(MIXED_2X2.splitlines())
    res = results[0]
    cells = sorted(c for p in res.placed for c in p.board_cells())
    assert cells == [(x, y) for x in range(2) for y in range(2)]
    assert sorted(p.shape_id for p in res.placed) == [0, 0, 1]


@pytest.mark.parametrize(
    "region_line, ok, reason",
    [
        ("10x1: 4", False, "Demand area does not cover board exactly"),
        ("10x1: 6", False, "Demand area exceeds board"),
    ],
)
def test_area_checks_happen_before_placements(monkeypatch, region_line, ok, reason):
    def _fail(*_args, **_kwargs):
        raise AssertionError("placements must not be generated")

    monkeypatch.setattr(orchestrator, "build_placements", _fail)
    puzzle = parse_shapes_and_regions(["0: ##", region_line])
    res = solve_region(puzzle.shapes, puzzle.regions[0])
    assert res.ok is ok
    assert res.reason == reason


def test_area_equal_to_board_reaches_search():
    puzzle = parse_shapes_and_regions(["0: ##", "10x1: 5"])
    res = solve_region(puzzle.shapes, puzzle.regions[0])
    assert res.ok
    assert res.meta["placements"] == 9
    assert res.meta["nodes"] == 5


def test_allow_gaps_changes_the_verdict():
    assert _count(L_TROMINO_2X2, allow_gaps=True) == 1
    assert _count(DOMINOES_3X3, allow_gaps=True) == 1
    assert _count("0: ##\n\n3x1: 2\n", allow_gaps=True) == 0


def test_allow_gaps_default_comes_from_config(monkeypatch):
    monkeypatch.setattr(CFG, "ALLOW_GAPS", True)
    assert _count(L_TROMINO_2X2) == 1


def test_empty_demand_is_tileable():
    count, results = solve_day12("0: #\n\n3x3: 0\n3x3:\n".splitlines())
    assert count == 2
    assert all(r.reason == "Empty demand" for r in results)


def test_parity_prune_is_reported_and_agrees_with_search():
    _count_, results = solve_day12(X_AND_DOMINOES.splitlines())
    assert results[0].meta["pruned_by"] == "parity"

    _count_, unpruned = solve_day12(X_AND_DOMINOES.splitlines(), use_parity=False)
    assert not unpruned[0].ok
    assert unpruned[0].reason == "Search exhausted"
    assert "pruned_by" not in unpruned[0].meta


def test_shape_that_cannot_fit_any_orientation():
    count, results = solve_day12("0: ###\n\n2x2: 1\n".splitlines(), allow_gaps=True)
    assert count == 0
    assert "does not fit" in results[0].reason


def test_demanding_an_undefined_shape_is_an_input_error():
    with pytest.raises(PuzzleInputError):
        solve_day12("0: #\n\n1x1: 0 1\n".splitlines())
    with pytest.raises(PuzzleInputError):
        solve_day12("1: #\n\n1x1: 1\n".splitlines())


def test_zero_counts_for_undefined_shapes_are_fine():
    assert _count("0: #\n\n1x1: 1 0 0\n") == 1


def test_board_word_cap_is_a_capacity_error(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_BOARD_WORDS", 1)
    with pytest.raises(CapacityError):
        solve_day12("0: #\n\n9x8: 72\n".splitlines())


def test_unknown_backend():
    with pytest.raises(ValueError):
        solve_day12(MONOMINO_1X1.splitlines(), backend="annealing")


def test_results_are_deterministic():
    text = "0:\n#.\n##\n1: ##\n\n4x4: 4 2\n5x3: 3 3\n"
    _c1, first = solve_day12(text.splitlines())
    _c2, second = solve_day12(text.splitlines())
    assert [r.ok for r in first] == [r.ok for r in second]
    assert [r.placed for r in first] == [r.placed for r in second]


def test_progress_tracks_regions():
    progress.reset()
    solve_day12("0: ##\n\n2x2: 2\n2x2: 1\n2x3: 3\n".splitlines())
    snap = progress.snapshot()
    assert snap["day"] == "day12"
    assert snap["regions_total"] == 3
    assert snap["region"] == ""
    assert snap["regions_done"] == 3
    assert snap["solved"] == 2
    assert snap["percent"] == 100.0
