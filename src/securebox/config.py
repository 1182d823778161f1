"""
Experiment configuration.

Configs are YAML files with a single top-level ``experiment`` mapping::

    experiment:
      board:
        sizes: [[3, 3], [4, 5]]
      initial_states:
        n_samples: 100
        seed: 0
        max_toggles: 1000
      strategies:
        - linear_algebra
        - name: random_toggle
      budget_T: 200
      solver:
        method: auto
        dense_limit: 256
      output_dir: results/runs

Keys left out fall back to :data:`DEFAULTS`.
"""
from __future__ import annotations

import copy
from pathlib import Path

import yaml

from .solver import DEFAULT_DENSE_LIMIT, METHODS


class ConfigError(ValueError):
    """Raised on a malformed configuration file."""


DEFAULTS: dict = {
    "board": {"sizes": [[3, 3]]},
    "initial_states": {"n_samples": 100, "seed": 0, "max_toggles": 1000},
    "strategies": ["linear_algebra"],
    "budget_T": 200,
    "solver": {"method": "auto", "dense_limit": DEFAULT_DENSE_LIMIT},
    "output_dir": "results/runs",
}


def _merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


SECTIONS = ("board", "initial_states", "solver")


def _as_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def board_sizes(cfg: dict) -> list[tuple[int, int]]:
    """Grid sizes named by ``board``: either ``rows``/``cols`` or ``sizes``."""
    board = cfg["board"]
    if "rows" in board or "cols" in board:
        try:
            return [(_as_int(board["rows"], "rows"), _as_int(board["cols"], "cols"))]
        except KeyError as e:
            raise ConfigError(f"board needs both rows and cols, missing {e}") from e
    try:
        return [
            (_as_int(r, "rows"), _as_int(c, "cols")) for r, c in board["sizes"]
        ]
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"board sizes must be [rows, cols] pairs: {e}") from e


def validate(cfg: dict) -> dict:
    for section in SECTIONS:
        if not isinstance(cfg[section], dict):
            raise ConfigError(f"'{section}' must be a mapping, got {cfg[section]!r}")

    method = cfg["solver"].get("method", "auto")
    if method not in METHODS:
        raise ConfigError(
            f"Unknown solver method '{method}', expected one of {METHODS}"
        )
    cfg["solver"]["dense_limit"] = _as_int(cfg["solver"]["dense_limit"], "dense_limit")
    for key in ("n_samples", "seed", "max_toggles"):
        cfg["initial_states"][key] = _as_int(cfg["initial_states"][key], key)

    cfg["budget_T"] = _as_int(cfg["budget_T"], "budget_T")
    if cfg["budget_T"] < 0:
        raise ConfigError("budget_T must be non-negative")
    for rows, cols in board_sizes(cfg):
        if rows <= 0 or cols <= 0:
            raise ConfigError(f"Invalid board size {rows}x{cols}")
    if not isinstance(cfg["strategies"], list):
        raise ConfigError("'strategies' must be a list")
    return cfg


def load_config(path: str | Path | None = None) -> dict:
    """Load the ``experiment`` section of a YAML file merged over the defaults."""
    if path is None:
        return copy.deepcopy(DEFAULTS)

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e

    if not isinstance(raw, dict) or "experiment" not in raw:
        raise ConfigError(f"{path}: missing top-level 'experiment' key")
    experiment = raw["experiment"] or {}
    if not isinstance(experiment, dict):
        raise ConfigError(f"{path}: 'experiment' must be a mapping")

    return validate(_merge(copy.deepcopy(DEFAULTS), experiment))
