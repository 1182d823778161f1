from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import numpy as np


def index(row: int, col: int, cols: int) -> int:
    """Row-major flat index of ``(row, col)``."""
    return row * cols + col


def position(idx: int, cols: int) -> Tuple[int, int]:
    r, c = divmod(int(idx), cols)
    return r, c


def effect(i: int, j: int, rows: int, cols: int) -> np.ndarray:
    """Return the flip pattern (length rows*cols, uint8) of toggling (i, j).

    Row ``i`` and column ``j`` are unioned, so the pattern has exactly
    ``rows + cols - 1`` ones.
    """
    grid = np.zeros((rows, cols), dtype=np.uint8)
    grid[i, :] = 1
    grid[:, j] = 1
    return grid.reshape(-1)


def combine(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Net flip pattern of applying ``a`` then ``b`` (GF(2) addition)."""
    return np.bitwise_xor(a, b).astype(np.uint8)


def apply_toggles(
    toggles: Iterable[Tuple[int, int]], rows: int, cols: int
) -> np.ndarray:
    """XOR-fold of ``effect`` over every toggle position."""
    acc = np.zeros((rows * cols,), dtype=np.uint8)
    for i, j in toggles:
        acc = combine(acc, effect(i, j, rows, cols))
    return acc


def build_A(rows: int, cols: int) -> np.ndarray:
    """Return the NxN effect matrix A over GF(2), N = rows*cols.
    Column j encodes the cells flipped when toggling cell j.
    """
    N = rows * cols
    A = np.zeros((N, N), dtype=np.uint8)
    for r in range(rows):
        for c in range(cols):
            A[:, index(r, c, cols)] = effect(r, c, rows, cols)
    return A


def gf2_rref_augmented(
    A: np.ndarray, b: np.ndarray
) -> Tuple[np.ndarray, list[int]]:
    """Return RREF of augmented matrix [A|b] over GF(2) and list of pivot columns."""
    A = (A % 2).astype(np.uint8)
    b = (b % 2).astype(np.uint8).reshape(-1, 1)
    m, n = A.shape
    M = np.concatenate([A, b], axis=1)  # shape (m, n+1)

    row = 0
    pivcols: list[int] = []
    for col in range(n):
        # first row at or below the current one with a 1 in this column
        below = np.flatnonzero(M[row:, col])
        if below.size == 0:
            continue
        pivot = row + int(below[0])
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        # eliminate ALL other rows (Gauss-Jordan)
        hits = M[:, col].astype(bool)
        hits[row] = False
        M[hits] ^= M[row]
        pivcols.append(col)
        row += 1
        if row == m:
            break
    return M, pivcols


def gf2_inconsistent_row(R: np.ndarray) -> Optional[int]:
    """Index of the first ``0...0 | 1`` row of a reduced augmented matrix."""
    R_A = R[:, :-1]
    R_b = R[:, -1]
    bad = np.flatnonzero((R_A.sum(axis=1) == 0) & (R_b == 1))
    if bad.size == 0:
        return None
    return int(bad[0])


def gf2_solve(
    A: np.ndarray, b: np.ndarray
) -> Tuple[Optional[np.ndarray], Optional[int]]:
    """Solve A x = b over GF(2).

    Returns:
        x0: one particular solution (length n, uint8) or None if inconsistent
        bad_row: index of the reduced row reading ``0 = 1``, or None
    """
    _, n = A.shape
    R, pivcols = gf2_rref_augmented(A, b)

    bad_row = gf2_inconsistent_row(R)
    if bad_row is not None:
        return None, bad_row

    # Back-substitution with free variables set to 0
    x0 = np.zeros((n,), dtype=np.uint8)
    for ri in range(len(pivcols) - 1, -1, -1):
        pc = pivcols[ri]
        rhs = int(R[ri, n])
        if pc + 1 < n:
            rhs ^= int(np.bitwise_and(R[ri, pc + 1 : n], x0[pc + 1 :]).sum() % 2)
        x0[pc] = rhs
    return x0, None


def gf2_nullspace(A: np.ndarray) -> List[np.ndarray]:
    """Basis of {v : A v = 0} over GF(2)."""
    m, n = A.shape
    R, pivcols = gf2_rref_augmented(A, np.zeros((m,), dtype=np.uint8))
    R_A = R[:, :n]

    # For each free column f, set v_f=1, other frees 0, solve pivot vars
    pivset = set(pivcols)
    frees = [j for j in range(n) if j not in pivset]
    basis: list[np.ndarray] = []
    for f in frees:
        v = np.zeros((n,), dtype=np.uint8)
        v[f] = 1
        for ri, pc in enumerate(pivcols):
            v[pc] = R_A[ri, f]
        basis.append(v)
    return basis


def gf2_rank(A: np.ndarray) -> int:
    m, _ = A.shape
    _, pivcols = gf2_rref_augmented(A, np.zeros((m,), dtype=np.uint8))
    return len(pivcols)
