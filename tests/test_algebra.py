from __future__ import annotations

import itertools

import numpy as np
import pytest

from securebox.algebra import (
    apply_toggles,
    build_A,
    combine,
    effect,
    gf2_nullspace,
    gf2_rank,
    gf2_solve,
    index,
    position,
)
from securebox.board import SecureBox
from securebox.solver import rank

SIZES = (1, 2, 3, 4, 5)


def test_index_position_row_major():
    assert index(1, 2, 4) == 6
    assert position(6, 4) == (1, 2)
    for k in range(12):
        assert index(*position(k, 3), 3) == k


@pytest.mark.parametrize(("rows", "cols"), itertools.product(SIZES, SIZES))
def test_effect_matches_box_toggle(rows: int, cols: int) -> None:
    for i in range(rows):
        for j in range(cols):
            e = effect(i, j, rows, cols)
            assert e.dtype == np.uint8
            assert int(e.sum()) == rows + cols - 1
            box = SecureBox(rows, cols)
            box.apply_toggle(i, j)
            assert np.array_equal(e.astype(bool), box.to_flat())


def test_intersection_not_double_flipped():
    e = effect(1, 2, 3, 4).reshape(3, 4)
    assert e[1, 2] == 1


def test_combine_is_self_inverse(fx_rng):
    a = effect(0, 1, 3, 3)
    assert not combine(a, a).any()
    b = (fx_rng.random(9) < 0.5).astype(np.uint8)
    assert np.array_equal(combine(combine(b, a), a), b)
    assert np.array_equal(combine(a, b), combine(b, a))


def test_apply_toggles_order_independent(fx_rng):
    rows, cols = 3, 4
    toggles = [(0, 0), (2, 3), (1, 1), (2, 0)]
    expected = apply_toggles(toggles, rows, cols)
    for perm in itertools.permutations(toggles):
        assert np.array_equal(apply_toggles(perm, rows, cols), expected)


def test_apply_toggles_repeat_cancels():
    assert not apply_toggles([(1, 1), (1, 1)], 3, 3).any()
    assert np.array_equal(
        apply_toggles([(0, 2), (1, 1), (0, 2)], 3, 3), effect(1, 1, 3, 3)
    )


def test_build_A_columns_are_effects():
    rows, cols = 2, 3
    A = build_A(rows, cols)
    assert A.shape == (6, 6)
    for i in range(rows):
        for j in range(cols):
            assert np.array_equal(A[:, index(i, j, cols)], effect(i, j, rows, cols))


def test_build_A_is_linear_map_of_toggle_sets(fx_rng):
    rows, cols = 3, 5
    A = build_A(rows, cols)
    c = (fx_rng.random(rows * cols) < 0.5).astype(np.uint8)
    toggles = [position(k, cols) for k in np.flatnonzero(c)]
    assert np.array_equal((A @ c) % 2, apply_toggles(toggles, rows, cols))


@pytest.mark.parametrize(("rows", "cols"), itertools.product(SIZES, SIZES))
def test_rank_closed_form(rows: int, cols: int) -> None:
    assert gf2_rank(build_A(rows, cols)) == rank(rows, cols)


@pytest.mark.parametrize(("rows", "cols"), [(3, 3), (2, 5), (4, 3), (4, 4)])
def test_nullspace(rows: int, cols: int) -> None:
    A = build_A(rows, cols)
    basis = gf2_nullspace(A)
    assert len(basis) == rows * cols - gf2_rank(A)
    for v in basis:
        assert v.any()
        assert not ((A @ v) % 2).any()


def test_gf2_solve_random_consistent(fx_rng):
    A = (fx_rng.random((8, 8)) < 0.4).astype(np.uint8)
    for _ in range(20):
        x = (fx_rng.random(8) < 0.5).astype(np.uint8)
        b = (A @ x) % 2
        sol, bad_row = gf2_solve(A, b)
        assert bad_row is None
        assert np.array_equal((A @ sol) % 2, b)


def test_gf2_solve_reports_inconsistent_row():
    A = np.array([[1, 1], [1, 1]], dtype=np.uint8)
    b = np.array([1, 0], dtype=np.uint8)
    sol, bad_row = gf2_solve(A, b)
    assert sol is None
    assert bad_row == 1
