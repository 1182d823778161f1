from __future__ import annotations

from typing import Optional, Tuple

from ..board import SecureBox
from ..solver import Solver, Unsolvable
from .base import NoPlanError, Strategy


class LinearAlgebraReplanning(Strategy):
    """
    Solve the box at each step and play the first toggle of the fresh plan.
    Replans after every move based on the current state.
    """

    def __init__(self, solver: Solver | None = None):
        self.solver = solver or Solver()
        self.rows: Optional[int] = None
        self.cols: Optional[int] = None

    def reset(self, rows: int, cols: int, params: dict | None = None) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        if params is not None:
            solver = params.get("solver", None)
            if isinstance(solver, Solver):
                self.solver = solver

    def select_action(self, state: SecureBox, t: int, history) -> Tuple[int, int]:
        assert self.rows is not None, "LinearAlgebraReplanning: call reset() first"

        result = self.solver.solve(state.snapshot())
        if isinstance(result, Unsolvable):
            raise NoPlanError(f"Box cannot be unlocked: {result.reason}")
        for pos in self.solver.toggle_sequence(result):
            return pos
        raise NoPlanError("LinearAlgebraReplanning: empty plan (box already open).")
