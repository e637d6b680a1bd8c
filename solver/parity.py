# solver/parity.py — checkerboard colouring infeasibility test
import logging
from typing import Sequence

from models import Shape
from shapes import colour_imbalance

log = logging.getLogger(__name__)


def board_colour_caps(W: int, H: int):
    """(black, white) cell counts of a W×H board with (0, 0) black."""
    board = W * H
    return (board + 1) // 2, board // 2


def reachable_offsets(imbalances: Sequence[int]) -> int:
    """Subset-sum bitset: bit t is set iff some subset of ``imbalances`` sums to t."""
    total = sum(imbalances)
    limit = (1 << (total + 1)) - 1
    reach = 1
    for d in imbalances:
        if d:
            reach |= (reach << d) & limit
    return reach


def parity_possible(
    shapes: Sequence[Shape],
    counts: Sequence[int],
    W: int,
    H: int,
    area_sum: int,
) -> bool:
    """
    Necessary condition only: ``False`` proves the demand cannot be placed.

    Every orientation of a piece covers either (b0, w0) or (w0, b0) black/white
    cells, so each copy contributes a signed imbalance of ``+d`` or ``-d`` with
    ``d = |b0 - w0|``.  If ``t`` is the total of the pieces taking ``-d``, the
    signed imbalance is ``sumD - 2t``; the demand passes when some reachable
    ``t`` leaves black and white usage inside the board's colour capacities.
    """
    bcap, wcap = board_colour_caps(W, H)

    per_piece = []
    for shape, cnt in zip(shapes, counts):
        if cnt <= 0 or not shape.orientations:
            continue
        d = colour_imbalance(shape.orientations[0])
        per_piece.extend([d] * cnt)
    sum_d = sum(per_piece)

    try:
        reach = reachable_offsets(per_piece)
    except MemoryError:
        log.warning("parity prune skipped: out of memory (sumD=%d)", sum_d)
        return True

    for t in range(sum_d + 1):
        if not (reach >> t) & 1:
            continue
        signed = sum_d - 2 * t
        if (area_sum + signed) % 2:
            continue
        black_used = (area_sum + signed) // 2
        white_used = area_sum - black_used
        if black_used < 0 or white_used < 0:
            continue
        if black_used <= bcap and white_used <= wcap:
            return True
    return False


__all__ = ["board_colour_caps", "reachable_offsets", "parity_possible"]
