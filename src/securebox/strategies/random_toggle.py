from __future__ import annotations

from typing import Optional

import numpy as np

from ..board import SecureBox
from .base import Strategy


class RandomToggle(Strategy):
    def __init__(self, rng: np.random.Generator | None = None):
        self.rng = rng or np.random.default_rng()

        self.rows: Optional[int] = None
        self.cols: Optional[int] = None

    def reset(self, rows: int, cols: int, params: dict | None = None):
        self.rows = int(rows)
        self.cols = int(cols)
        if params is not None:
            rng = params.get("rng", None)
            if isinstance(rng, np.random.Generator):
                self.rng = rng

    def select_action(self, state: SecureBox, t: int, history):
        assert self.rows is not None and self.cols is not None, (
            "Strategy not initialized properly."
        )

        return int(self.rng.integers(self.rows)), int(self.rng.integers(self.cols))
