from __future__ import annotations

import logging

import numpy as np
import pytest


@pytest.fixture
def fx_rng() -> np.random.Generator:
    return np.random.default_rng(seed=25)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("securebox")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def grid_from_bits(bits: int, rows: int, cols: int) -> np.ndarray:
    """Row-major: bit k of ``bits`` is cell ``divmod(k, cols)``."""
    flat = np.array([(bits >> k) & 1 for k in range(rows * cols)], dtype=bool)
    return flat.reshape(rows, cols)


def reachable_states(rows: int, cols: int) -> set[int]:
    """Every grid (as row-major bits) some toggle subset produces from all-clear."""
    reachable = {0}
    for i in range(rows):
        for j in range(cols):
            mask = 0
            for r in range(rows):
                for c in range(cols):
                    if r == i or c == j:
                        mask |= 1 << (r * cols + c)
            reachable |= {s ^ mask for s in reachable}
    return reachable
