from __future__ import annotations

import argparse
import logging
import sys
import time

import numpy as np

from .board import InvalidDimensions, SecureBox
from .config import ConfigError, load_config
from .evaluation.metrics import presses_used, success_within_budget
from .logging_config import LEVELS, setup_logging
from .simulator import Simulator
from .solver import METHODS, Solver
from .strategies import (
    LinearAlgebraPlan,
    LinearAlgebraReplanning,
    MaskToggle,
    RandomToggle,
)

logger = logging.getLogger(__name__)

STRATEGIES = (
    "linear_algebra",
    "linear_algebra_replanning",
    "mask_toggle",
    "random_toggle",
)


def make_strategy(
    name: str,
    rng: np.random.Generator | None = None,
    solver: Solver | None = None,
):
    name = name.lower()
    if name in ("linear_algebra", "linear_algebra_plan"):
        return LinearAlgebraPlan(solver=solver)
    if name == "linear_algebra_replanning":
        return LinearAlgebraReplanning(solver=solver)
    if name == "mask_toggle":
        return MaskToggle()
    if name == "random_toggle":
        return RandomToggle(rng=rng)
    raise ValueError(f"Unknown strategy: {name}")


def parse_strategies(cfg_strats):
    """Parse strategy configs from YAML."""
    parsed = []
    for item in cfg_strats:
        if isinstance(item, str):
            parsed.append({"name": item, "params": {}})
        elif isinstance(item, dict) and "name" in item:
            d = dict(item)  # shallow copy
            d.setdefault("params", {})
            parsed.append({"name": d["name"], "params": d["params"] or {}})
        else:
            raise ConfigError(f"Invalid strategy spec: {item}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="securebox",
        description="Shuffle a secure box and try to unlock it.",
    )
    ap.add_argument("rows", type=int, help="Number of rows")
    ap.add_argument("cols", type=int, help="Number of columns")
    ap.add_argument(
        "--seed", type=int, default=None, help="Shuffle seed (default: clock)"
    )
    ap.add_argument("--strategy", choices=STRATEGIES, default=None)
    ap.add_argument("--method", choices=METHODS, default=None)
    ap.add_argument("--budget", type=int, default=None, help="Max toggles")
    ap.add_argument("--config", default=None, help="YAML experiment config")
    ap.add_argument(
        "--show", action="store_true", help="Print the box before and after"
    )
    ap.add_argument(
        "--log-level", type=str.upper, choices=LEVELS, default="WARNING"
    )
    ap.add_argument("--log-file", default=None)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        cfg = load_config(args.config)
    except (OSError, ConfigError) as e:
        logger.error("Could not load config: %s", e)
        return 2

    seed = args.seed if args.seed is not None else time.time_ns()
    method = args.method or cfg["solver"]["method"]
    if args.budget is not None:
        budget = args.budget
    else:
        # a plan toggles each cell at most once
        budget = max(int(cfg["budget_T"]), args.rows * args.cols)
    if args.strategy is not None:
        strategy_name = args.strategy
    else:
        try:
            strategy_name = parse_strategies(cfg["strategies"])[0]["name"]
        except (ConfigError, IndexError) as e:
            logger.error("No usable strategy in config: %s", e)
            return 2

    rng = np.random.default_rng(seed)
    try:
        box = SecureBox.shuffled(
            args.rows,
            args.cols,
            rng,
            max_toggles=int(cfg["initial_states"]["max_toggles"]),
        )
    except InvalidDimensions as e:
        logger.error("%s", e)
        return 2

    solver = Solver(method=method, dense_limit=int(cfg["solver"]["dense_limit"]))
    try:
        strategy = make_strategy(strategy_name, rng=rng, solver=solver)
    except ValueError as e:
        logger.error("%s", e)
        return 2
    strategy.reset(args.rows, args.cols, params={"rng": rng, "solver": solver})

    if args.show:
        print(box)
        print()

    final, _, counts = Simulator().run(box, strategy, T=budget)
    logger.info(
        "Strategy %s used %d toggles (seed=%d)",
        strategy_name,
        presses_used(counts),
        seed,
    )

    if args.show:
        print(final)
        print()

    if success_within_budget(counts, budget) and final.is_all_clear():
        print("BOX: OPENED!")
        return 0
    print("BOX: LOCKED!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
