#!/usr/bin/env python3
"""
cli.py - command line entry point for the Day 12 and Day 08 solvers

Usage:
    aoc-solvers day12 [FILE] [--allow-gaps] [--backend dfs|cpsat] [--render]
    aoc-solvers day08 [FILE] [--part1-edges K]

Reads standard input when FILE is omitted.  Answers go to stdout; diagnostics
go to stderr.

Exit codes:
    0  success
    1  malformed input
    2  capacity exceeded
    3  out of memory
    4  CP-SAT backend could not decide a region
"""
import argparse
import logging
import sys
from typing import List, Optional

from config import CFG
from io_files import layout_lines
from models import CapacityError, PuzzleInputError
from progress import reset, set_done, start_timer
from puzzle_parser import decode_input, parse_points
from solver.cp_sat import CpSatUndecided
from solver.mst import solve_day08
from solver.orchestrator import BACKENDS, solve_day12

log = logging.getLogger("cli")

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_CAPACITY = 2
EXIT_MEMORY = 3
EXIT_UNDECIDED = 4


def _read_lines(path: Optional[str]) -> List[str]:
    if path is None or path == "-":
        try:
            return sys.stdin.read().splitlines()
        except UnicodeDecodeError as e:
            raise PuzzleInputError("Input is not valid UTF-8") from e
    with open(path, "rb") as fh:
        return decode_input(fh.read()).splitlines()


def _run_day12(args, lines: List[str]) -> str:
    count, results = solve_day12(
        lines,
        allow_gaps=True if args.allow_gaps else None,
        backend=args.backend,
        use_parity=False if args.no_parity else None,
    )
    if args.render:
        for row in layout_lines(results):
            print(row, file=sys.stderr)
    return f"{count}\n"


def _run_day08(args, lines: List[str]) -> str:
    points = parse_points(lines)
    p1, p2 = solve_day08(points, args.part1_edges)
    return f"Part1: {p1}\nPart2: {p2}\n"


def _edge_count(value: str) -> int:
    k = int(value)
    if k < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {k}")
    return k


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aoc-solvers", description="Day 12 / Day 08 puzzle solvers")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    sub = parser.add_subparsers(dest="day", required=True)

    d12 = sub.add_parser("day12", help="count tileable regions")
    d12.add_argument("input", nargs="?", help="puzzle file (default: stdin)")
    d12.add_argument("--allow-gaps", action="store_true",
                     help="pieces must fit but need not cover every cell")
    d12.add_argument("--backend", choices=BACKENDS, default=None,
                     help=f"search backend (default: {CFG.BACKEND})")
    d12.add_argument("--no-parity", action="store_true", help="disable the parity prune")
    d12.add_argument("--render", action="store_true", help="draw solved regions on stderr")
    d12.set_defaults(run=_run_day12)

    d08 = sub.add_parser("day08", help="MST over 3-D points")
    d08.add_argument("input", nargs="?", help="puzzle file (default: stdin)")
    d08.add_argument("--part1-edges", type=_edge_count, default=None,
                     help=f"edges consumed for part 1 (default: {CFG.MST_PART1_EDGES})")
    d08.set_defaults(run=_run_day08)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    reset()
    start_timer()
    try:
        lines = _read_lines(args.input)
        out = args.run(args, lines)
    except (PuzzleInputError, OSError) as e:
        log.error("%s", e)
        set_done(False, reason=str(e))
        return EXIT_INPUT
    except CapacityError as e:
        log.error("%s", e)
        set_done(False, reason=str(e))
        return EXIT_CAPACITY
    except MemoryError:
        log.error("out of memory")
        set_done(False, reason="out of memory")
        return EXIT_MEMORY
    except CpSatUndecided as e:
        log.error("%s", e)
        set_done(False, reason=str(e))
        return EXIT_UNDECIDED

    sys.stdout.write(out)
    set_done(True)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
