from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from ..board import SecureBox
from .base import NoPlanError, Strategy


def _all_on_with_mixed_parity(grid: np.ndarray) -> bool:
    rows, cols = grid.shape
    return rows % 2 != cols % 2 and bool(grid.all())


class MaskToggle(Strategy):
    """
    Toggle every cell that is on, then look again.
    When a full pass leaves every cell on, toggle the first column (odd rows)
    or the first row (even rows) instead. Not guaranteed to terminate.
    """

    def __init__(self):
        self.queue: List[Tuple[int, int]] = []
        self.rows: Optional[int] = None
        self.cols: Optional[int] = None
        self._after_pass = False

    def reset(self, rows: int, cols: int, params: dict | None = None) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        self.queue = []
        self._after_pass = False

    def _escape_moves(self) -> List[Tuple[int, int]]:
        assert self.rows is not None and self.cols is not None
        if self.rows % 2:
            return [(r, 0) for r in range(self.rows)]
        return [(0, c) for c in range(self.cols)]

    def select_action(self, state: SecureBox, t: int, history) -> Tuple[int, int]:
        assert self.rows is not None, "Strategy not initialized properly."

        if not self.queue:
            grid = state.snapshot()
            if self._after_pass and _all_on_with_mixed_parity(grid):
                self.queue = self._escape_moves()
                self._after_pass = False
            else:
                self.queue = [(int(r), int(c)) for r, c in zip(*np.nonzero(grid))]
                self._after_pass = True
            if not self.queue:
                raise NoPlanError("Nothing left to toggle.")
        return self.queue.pop(0)
