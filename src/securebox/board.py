from __future__ import annotations

import numpy as np


class InvalidDimensions(ValueError):
    """Raised when a box is created with a zero-sized (or negative) side."""


class SecureBox:
    """Rectangular grid of locks; ``True`` is locked, ``False`` is open.

    A toggle at ``(row, col)`` flips every cell in ``row`` and every cell in
    ``col``. The intersection cell ends up flipped exactly once.
    """

    def __init__(self, rows: int, cols: int, state: np.ndarray | None = None):
        if rows <= 0 or cols <= 0:
            raise InvalidDimensions(
                f"Box dimensions must be positive, got {rows}x{cols}"
            )
        self.rows = int(rows)
        self.cols = int(cols)
        if state is None:
            self.state = np.zeros((self.rows, self.cols), dtype=bool)
        else:
            state = np.asarray(state)
            if state.shape != (self.rows, self.cols):
                raise ValueError(
                    f"Expected state of shape {(self.rows, self.cols)}, got {state.shape}"
                )
            self.state = state.astype(bool, copy=True)

    @classmethod
    def shuffled(
        cls,
        rows: int,
        cols: int,
        rng: np.random.Generator,
        max_toggles: int = 1000,
    ) -> "SecureBox":
        """Return a box locked by a random number of random toggles."""
        box = cls(rows, cols)
        num_toggles = int(rng.integers(0, max_toggles)) if max_toggles > 0 else 0
        for _ in range(num_toggles):
            box.apply_toggle(int(rng.integers(rows)), int(rng.integers(cols)))
        return box

    def dimensions(self) -> tuple[int, int]:
        return self.rows, self.cols

    def snapshot(self) -> np.ndarray:
        return self.state.copy()

    def apply_toggle(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Toggle position {(row, col)} outside {self.rows}x{self.cols} box"
            )
        self.state[row, :] ^= True
        self.state[:, col] ^= True
        # the column pass undid the row pass at the intersection
        self.state[row, col] ^= True

    def is_all_clear(self) -> bool:
        return not self.state.any()

    def is_locked(self) -> bool:
        return bool(self.state.any())

    def copy(self) -> "SecureBox":
        return SecureBox(self.rows, self.cols, self.state.copy())

    def to_flat(self) -> np.ndarray:
        return self.state.reshape(-1)

    @staticmethod
    def from_flat(rows: int, cols: int, flat: np.ndarray) -> "SecureBox":
        return SecureBox(rows, cols, np.asarray(flat).reshape(rows, cols))

    def count_on(self) -> int:
        return int(self.state.sum())

    def __repr__(self):
        return f"SecureBox(rows={self.rows}, cols={self.cols}, on={self.count_on()})"

    def __str__(self) -> str:
        return "\n".join(
            "".join("1" if cell else "0" for cell in row) for row in self.state
        )
