# solver/placements.py — packed uint64 board masks and per-shape placement lists
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from config import CFG
from models import CapacityError, Placed, Shape

WORD_BITS = 64


def nwords_for_board(W: int, H: int) -> int:
    return (W * H + WORD_BITS - 1) // WORD_BITS


def board_words(W: int, H: int) -> int:
    """Word count for a W×H board, enforcing the configured word cap."""
    nwords = nwords_for_board(W, H)
    if nwords > CFG.MAX_BOARD_WORDS:
        raise CapacityError(
            f"Board {W}x{H} needs {nwords} words (max {CFG.MAX_BOARD_WORDS}, "
            f"i.e. {CFG.MAX_BOARD_WORDS * WORD_BITS} cells)"
        )
    return nwords


def empty_board(nwords: int) -> np.ndarray:
    return np.zeros(nwords, dtype=np.uint64)


def _bits(masks: np.ndarray) -> np.ndarray:
    # little-endian bytes + little bit order => column k is board bit k
    m = np.ascontiguousarray(masks, dtype="<u8")
    return np.unpackbits(m.view(np.uint8), axis=-1, bitorder="little")


def popcount(words: np.ndarray) -> int:
    return int(_bits(words).sum())


def popcount_rows(masks: np.ndarray) -> np.ndarray:
    return _bits(masks).sum(axis=1)


def mask_cells(words: np.ndarray) -> List[int]:
    """Indices of the set bits of one mask, ascending."""
    return np.flatnonzero(_bits(words)).tolist()


def placement_cells(masks: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """(row, cell) index pairs for every set bit of a stack of masks."""
    return np.nonzero(_bits(masks))


@dataclass
class PlacementList:
    shape: Shape
    masks: np.ndarray        # (n, nwords) uint64
    orientation: np.ndarray  # (n,) orientation index per row
    x0: np.ndarray
    y0: np.ndarray

    def __len__(self) -> int:
        return int(self.masks.shape[0])

    @property
    def area(self) -> int:
        return self.shape.area

    def placed(self, i: int) -> Placed:
        oi = int(self.orientation[i])
        return Placed(
            shape_id=self.shape.id,
            orientation=oi,
            x=int(self.x0[i]),
            y=int(self.y0[i]),
            poly=self.shape.orientations[oi],
        )


def _orientation_masks(cells, w: int, h: int, W: int, H: int, nwords: int):
    cx = np.array([c[0] for c in cells], dtype=np.int64)
    cy = np.array([c[1] for c in cells], dtype=np.int64)
    ys = np.arange(H - h + 1, dtype=np.int64)
    xs = np.arange(W - w + 1, dtype=np.int64)
    y0, x0 = np.meshgrid(ys, xs, indexing="ij")  # x0 varies fastest
    y0 = y0.ravel()
    x0 = x0.ravel()

    bits = (y0[:, None] + cy[None, :]) * W + (x0[:, None] + cx[None, :])
    rows = np.broadcast_to(np.arange(len(y0))[:, None], bits.shape)
    masks = np.zeros((len(y0), nwords), dtype=np.uint64)
    np.bitwise_or.at(
        masks,
        (rows.ravel(), (bits >> 6).ravel()),
        np.left_shift(np.uint64(1), (bits & 63).astype(np.uint64)).ravel(),
    )
    return masks, x0, y0


def build_placements(shape: Shape, W: int, H: int, nwords: int) -> PlacementList:
    """
    Every (orientation, y0, x0) translation of ``shape`` that fits a W×H board,
    in that order.  Row order is load-bearing: the search breaks symmetry
    between identical pieces by only moving forward through this list.
    """
    mask_parts: List[np.ndarray] = []
    ori_parts: List[np.ndarray] = []
    x_parts: List[np.ndarray] = []
    y_parts: List[np.ndarray] = []

    for oi, poly in enumerate(shape.orientations):
        if poly.w > W or poly.h > H:
            continue
        masks, x0, y0 = _orientation_masks(poly.cells, poly.w, poly.h, W, H, nwords)
        mask_parts.append(masks)
        ori_parts.append(np.full(len(x0), oi, dtype=np.int64))
        x_parts.append(x0)
        y_parts.append(y0)

    if not mask_parts:
        empty = np.zeros(0, dtype=np.int64)
        return PlacementList(shape, np.zeros((0, nwords), dtype=np.uint64), empty, empty, empty)

    return PlacementList(
        shape=shape,
        masks=np.vstack(mask_parts),
        orientation=np.concatenate(ori_parts),
        x0=np.concatenate(x_parts),
        y0=np.concatenate(y_parts),
    )


def fits_somewhere(shape: Shape, W: int, H: int) -> bool:
    return any(p.w <= W and p.h <= H for p in shape.orientations)


__all__ = [
    "WORD_BITS",
    "nwords_for_board",
    "board_words",
    "empty_board",
    "popcount",
    "popcount_rows",
    "mask_cells",
    "placement_cells",
    "PlacementList",
    "build_placements",
    "fits_somewhere",
]
