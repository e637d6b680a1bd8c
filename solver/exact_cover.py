# solver/exact_cover.py — bitset branch-and-bound search over precomputed placements
from typing import List, Optional, Sequence, Tuple

import numpy as np

from solver.placements import PlacementList, empty_board, nwords_for_board


class _Frame:
    __slots__ = ("t", "candidates", "pos", "saved_last", "applied")

    def __init__(self, t: int, candidates: np.ndarray, saved_last: int):
        self.t = t
        self.candidates = candidates
        self.pos = 0
        self.saved_last = saved_last
        self.applied = -1


class SearchContext:
    """
    Mutable search state for one region.

    ``placements[t]`` is the ordered placement list of shape ``t`` (``None`` for
    shapes that are not demanded).  Identical copies of a shape are placed at
    strictly increasing indices of that list (``last_idx``), which removes the
    k! orderings of k identical pieces.
    """

    def __init__(
        self,
        W: int,
        H: int,
        placements: Sequence[Optional[PlacementList]],
        need: Sequence[int],
    ):
        self.W = W
        self.H = H
        self.nwords = nwords_for_board(W, H)
        self.placements = list(placements)
        self.areas = [pl.area if pl is not None else 0 for pl in self.placements]
        self.need = [int(n) for n in need]
        self.last_idx = [-1] * len(self.need)
        self.occ = empty_board(self.nwords)
        self.area_sum = sum(a * n for a, n in zip(self.areas, self.need))
        self.remaining_area = self.area_sum
        self.free_cells = W * H
        self.nodes = 0
        self.solution: List[Tuple[int, int]] = []

    # ---------- candidate selection ----------

    def compatible(self, t: int) -> np.ndarray:
        """Indices > last_idx[t] of placements of ``t`` that avoid ``occ``."""
        pl = self.placements[t]
        start = self.last_idx[t] + 1
        if pl is None or start >= len(pl):
            return np.zeros(0, dtype=np.intp)
        block = pl.masks[start:]
        free = ~np.any(block & self.occ, axis=1)
        return np.flatnonzero(free) + start

    def choose_next_type(self) -> Tuple[int, np.ndarray]:
        """Most constrained demanded type; ties go to the lowest index."""
        best_t = -1
        best: Optional[np.ndarray] = None
        for t, n in enumerate(self.need):
            if n <= 0:
                continue
            cand = self.compatible(t)
            if len(cand) == 0:
                return t, cand
            if best is None or len(cand) < len(best):
                best_t, best = t, cand
                if len(best) <= 1:
                    break
        if best is None:
            return -1, np.zeros(0, dtype=np.intp)
        return best_t, best

    # ---------- state transitions ----------

    def _apply(self, t: int, i: int) -> None:
        area = self.areas[t]
        self.last_idx[t] = i
        self.occ |= self.placements[t].masks[i]
        self.free_cells -= area
        self.need[t] -= 1
        self.remaining_area -= area

    def _undo(self, t: int, i: int) -> None:
        area = self.areas[t]
        # applied masks never overlap, so XOR clears exactly this piece
        self.occ ^= self.placements[t].masks[i]
        self.free_cells += area
        self.need[t] += 1
        self.remaining_area += area

    def _open(self) -> Optional[_Frame]:
        if self.remaining_area > self.free_cells:
            return None
        t, cand = self.choose_next_type()
        if t < 0 or len(cand) == 0:
            return None
        return _Frame(t, cand, self.last_idx[t])

    def _close(self, frame: _Frame) -> None:
        if frame.applied >= 0:
            self._undo(frame.t, frame.applied)
            frame.applied = -1
        self.last_idx[frame.t] = frame.saved_last

    # ---------- driver ----------

    def search(self) -> bool:
        """
        Depth-first search with an explicit stack.

        On success the chosen ``(type, index)`` pairs are left in ``solution``
        and the board is unwound, so ``occ``, ``need`` and ``last_idx`` are back
        at their initial values whatever the outcome.
        """
        self.solution = []
        if self.remaining_area == 0:
            return True

        first = self._open()
        if first is None:
            return False
        stack: List[_Frame] = [first]

        while stack:
            top = stack[-1]
            if top.applied >= 0:
                self._undo(top.t, top.applied)
                top.applied = -1
            if top.pos >= len(top.candidates):
                self._close(top)
                stack.pop()
                continue

            i = int(top.candidates[top.pos])
            top.pos += 1
            self._apply(top.t, i)
            top.applied = i
            self.nodes += 1

            if self.remaining_area == 0:
                self.solution = [(f.t, f.applied) for f in stack]
                while stack:
                    self._close(stack.pop())
                return True

            child = self._open()
            if child is not None:
                stack.append(child)

        return False

    def solution_placed(self):
        return [self.placements[t].placed(i) for t, i in self.solution]


__all__ = ["SearchContext"]
