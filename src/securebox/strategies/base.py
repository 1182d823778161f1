from __future__ import annotations
from typing import Protocol, Tuple
from ..board import SecureBox


class NoPlanError(Exception):
    """Raised by a strategy when no valid plan exists for the given state."""

    pass


class Strategy(Protocol):
    def reset(self, rows: int, cols: int, params: dict | None = None): ...
    def select_action(
        self, state: SecureBox, t: int, history
    ) -> Tuple[int, int]: ...
