"""Closed-form unlocking of a :class:`~securebox.board.SecureBox`.

Flattening the grid row-major (``index = row * cols + col``) turns a set of
toggles into a 0/1 vector ``c`` of length ``n = rows * cols`` and its net
effect into ``A c`` over GF(2), where column ``(i, j)`` of ``A`` is
``effect(i, j)``. Unlocking a box in state ``b`` means solving ``A c = b``.

Two methods are available:

* ``"dense"`` builds ``A`` and runs Gauss-Jordan elimination, ``O(n^3)``.
* ``"structured"`` uses the fact that toggling ``c`` flips cell ``(r, k)``
  exactly ``R_r + C_k + c[r, k]`` times, where ``R_r`` and ``C_k`` are the
  parities of row ``r`` and column ``k`` of ``c``. Solving for the row and
  column parities first gives ``c`` in ``O(n)``.

Both return a :class:`ToggleSet` or an :class:`Unsolvable`; neither retries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet, Iterator, Optional, Tuple, Union

import numpy as np

from .algebra import apply_toggles, build_A, gf2_solve, position
from .board import SecureBox

logger = logging.getLogger(__name__)

METHODS = ("auto", "dense", "structured")
DEFAULT_DENSE_LIMIT = 256
MATRIX_CACHE_SIZE = 8


@dataclass(frozen=True)
class ToggleSet:
    """Positions to toggle once each. Iterates in row-major order."""

    rows: int
    cols: int
    positions: FrozenSet[Tuple[int, int]] = field(default_factory=frozenset)

    solved = True

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(sorted(self.positions))

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, pos) -> bool:
        return tuple(pos) in self.positions

    def to_indicator(self) -> np.ndarray:
        c = np.zeros((self.rows * self.cols,), dtype=np.uint8)
        for r, k in self.positions:
            c[r * self.cols + k] = 1
        return c

    @staticmethod
    def from_indicator(rows: int, cols: int, c: np.ndarray) -> "ToggleSet":
        return ToggleSet(
            rows,
            cols,
            frozenset(position(i, cols) for i in np.flatnonzero(c)),
        )


@dataclass(frozen=True)
class Unsolvable:
    """No toggle set clears the grid.

    ``index`` is the equation that failed the consistency check: the reduced
    row reading ``0 = 1`` for the dense method, the offending grid row or
    column (named in ``reason``) for the structured one.
    """

    reason: str
    index: int
    method: str

    solved = False


SolveResult = Union[ToggleSet, Unsolvable]


class ToggleSequence:
    """Lazy, restartable row-major walk over a :class:`ToggleSet`."""

    def __init__(self, toggles: ToggleSet):
        self._toggles = toggles

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for r in range(self._toggles.rows):
            for k in range(self._toggles.cols):
                if (r, k) in self._toggles.positions:
                    yield r, k

    def __len__(self) -> int:
        return len(self._toggles)


@lru_cache(maxsize=MATRIX_CACHE_SIZE)
def effect_matrix(rows: int, cols: int) -> np.ndarray:
    """Read-only ``build_A`` shared by all solvers; keeps the most recent sizes."""
    A = build_A(rows, cols)
    A.setflags(write=False)
    return A


def _as_state(initial) -> np.ndarray:
    if isinstance(initial, SecureBox):
        return initial.snapshot()
    state = np.asarray(initial, dtype=bool)
    if state.ndim != 2 or 0 in state.shape:
        raise ValueError(f"Expected a non-empty 2D grid, got shape {state.shape}")
    return state


def parity_obstruction(initial) -> Optional[Unsolvable]:
    """Closed-form consistency check from row and column parities.

    * both sides even: every grid is solvable;
    * odd rows, even cols: all column parities must agree;
    * even rows, odd cols: all row parities must agree;
    * both odd: all row and column parities must agree.
    """
    b = _as_state(initial).astype(np.uint8)
    rows, cols = b.shape
    row_par = b.sum(axis=1) % 2
    col_par = b.sum(axis=0) % 2

    check_rows = cols % 2 == 1
    check_cols = rows % 2 == 1
    ref = int(row_par[0]) if check_rows else int(col_par[0])

    if check_rows:
        bad = np.flatnonzero(row_par != ref)
        if bad.size:
            return Unsolvable(
                f"row {int(bad[0])} parity differs from row 0",
                int(bad[0]),
                "structured",
            )
    if check_cols:
        bad = np.flatnonzero(col_par != ref)
        if bad.size:
            return Unsolvable(
                f"column {int(bad[0])} parity differs from "
                + ("row 0" if check_rows else "column 0"),
                int(bad[0]),
                "structured",
            )
    return None


def _solve_structured(b: np.ndarray) -> SolveResult:
    rows, cols = b.shape
    obstruction = parity_obstruction(b)
    if obstruction is not None:
        return obstruction

    b = b.astype(np.uint8)
    row_par = b.sum(axis=1) % 2
    col_par = b.sum(axis=0) % 2

    R = np.zeros((rows,), dtype=np.uint8)
    C = np.zeros((cols,), dtype=np.uint8)
    if rows % 2 == 0 and cols % 2 == 0:
        total = int(b.sum() % 2)
        R[:] = row_par ^ total
        C[:] = col_par ^ total
    elif rows % 2 == 1 and cols % 2 == 0:
        delta = int(col_par[0])
        C[0] = delta
        R[:] = row_par ^ delta
    elif rows % 2 == 0 and cols % 2 == 1:
        beta = int(row_par[0])
        R[0] = beta
        C[:] = col_par ^ beta
    else:
        p = int(row_par[0])
        R[0] = p
        C[0] = p

    c = b ^ R[:, None] ^ C[None, :]
    return ToggleSet.from_indicator(rows, cols, c.reshape(-1))


class Solver:
    """Solve ``A c = b`` over GF(2) for a box snapshot."""

    def __init__(self, method: str = "auto", dense_limit: int = DEFAULT_DENSE_LIMIT):
        if method not in METHODS:
            raise ValueError(f"Unknown solver method '{method}'")
        self.method = method
        self.dense_limit = int(dense_limit)

    def _pick_method(self, rows: int, cols: int) -> str:
        if self.method != "auto":
            return self.method
        return "dense" if rows * cols <= self.dense_limit else "structured"

    def _solve_dense(self, b: np.ndarray) -> SolveResult:
        rows, cols = b.shape
        A = effect_matrix(rows, cols)
        x, bad_row = gf2_solve(A, b.reshape(-1).astype(np.uint8))
        if x is None:
            assert bad_row is not None
            return Unsolvable(
                f"reduced row {bad_row} reads 0 = 1", bad_row, "dense"
            )
        return ToggleSet.from_indicator(rows, cols, x)

    def solve(self, initial) -> SolveResult:
        b = _as_state(initial)
        rows, cols = b.shape
        method = self._pick_method(rows, cols)
        logger.debug("Solving %dx%d box with %s method", rows, cols, method)

        if method == "dense":
            result = self._solve_dense(b)
        else:
            result = _solve_structured(b)

        if isinstance(result, Unsolvable):
            logger.info("Box %dx%d is unsolvable: %s", rows, cols, result.reason)
        else:
            logger.debug("Found %d toggles", len(result))
        return result

    @staticmethod
    def toggle_sequence(result: SolveResult) -> ToggleSequence:
        if isinstance(result, Unsolvable):
            raise ValueError(f"Cannot sequence an unsolvable result: {result.reason}")
        return ToggleSequence(result)

    @staticmethod
    def verify(initial, toggles: ToggleSet) -> bool:
        """Re-simulate ``toggles`` on ``initial`` and check it ends all-clear."""
        b = _as_state(initial).astype(np.uint8).reshape(-1)
        rows, cols = toggles.rows, toggles.cols
        if b.size != rows * cols:
            raise ValueError("Toggle set and grid sizes differ")
        return not np.any(b ^ apply_toggles(toggles, rows, cols))

    def unlock(self, box: SecureBox) -> SolveResult:
        """Solve from a snapshot and apply the toggles to ``box`` in place."""
        result = self.solve(box.snapshot())
        if isinstance(result, Unsolvable):
            return result
        for r, k in self.toggle_sequence(result):
            box.apply_toggle(r, k)
        if not box.is_all_clear():
            # box was mutated between snapshot and application
            raise RuntimeError("Box still locked after applying a verified plan")
        return result


def solve(initial, method: str = "auto") -> SolveResult:
    return Solver(method=method).solve(initial)


def toggle_sequence(result: SolveResult) -> ToggleSequence:
    return Solver.toggle_sequence(result)


def rank(rows: int, cols: int) -> int:
    """Rank of the effect matrix for a ``rows x cols`` box."""
    n = rows * cols
    if rows % 2 == 0 and cols % 2 == 0:
        return n
    if rows % 2 == 1 and cols % 2 == 1:
        return n - (rows + cols - 2)
    if rows % 2 == 1:
        return n - (cols - 1)
    return n - (rows - 1)
