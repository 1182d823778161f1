from __future__ import annotations

from typing import List, Optional, Tuple

from ..board import SecureBox
from ..solver import Solver, Unsolvable
from .base import NoPlanError, Strategy


class LinearAlgebraPlan(Strategy):
    """Solve the box once upfront and play the toggle set in row-major order."""

    def __init__(self, solver: Solver | None = None):
        self.solver = solver or Solver()
        self.plan: List[Tuple[int, int]] | None = None
        self.rows: Optional[int] = None
        self.cols: Optional[int] = None

    def reset(self, rows: int, cols: int, params: dict | None = None) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        self.plan = None
        if params is not None:
            solver = params.get("solver", None)
            if isinstance(solver, Solver):
                self.solver = solver

    def _compute_plan(self, state: SecureBox) -> None:
        assert (
            self.rows is not None and self.cols is not None
        ), "Strategy not initialized properly."
        result = self.solver.solve(state.snapshot())
        if isinstance(result, Unsolvable):
            self.plan = []
            raise NoPlanError(f"Box cannot be unlocked: {result.reason}")
        self.plan = list(self.solver.toggle_sequence(result))

    def select_action(self, state: SecureBox, t: int, history) -> Tuple[int, int]:
        if self.plan is None:
            self._compute_plan(state)

        if not self.plan:
            raise NoPlanError("Toggle plan exhausted.")
        return self.plan.pop(0)
