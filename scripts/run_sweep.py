import argparse
import csv
import logging
import multiprocessing as mp
import os
import sys
import time
import zlib
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from securebox.board import SecureBox  # noqa: E402
from securebox.cli import make_strategy, parse_strategies  # noqa: E402
from securebox.config import board_sizes, load_config  # noqa: E402
from securebox.evaluation.metrics import (  # noqa: E402
    presses_used,
    success_within_budget,
)
from securebox.logging_config import LEVELS, setup_logging  # noqa: E402
from securebox.simulator import Simulator  # noqa: E402
from securebox.solver import Solver, Unsolvable  # noqa: E402

# Limit threads per worker
os.environ["OMP_NUM_THREADS"] = "1"
os.environ["OPENBLAS_NUM_THREADS"] = "1"
os.environ["MKL_NUM_THREADS"] = "1"
mp.freeze_support()

logger = logging.getLogger("securebox.sweep")


def sample_initial_states(
    rows: int, cols: int, n_samples: int, rng: np.random.Generator
) -> list[np.ndarray]:
    """Sample random boolean grids; unlike shuffled boxes these may be unsolvable."""
    states = []
    max_lights = rows * cols

    for _ in range(n_samples):
        num_on = rng.integers(1, max_lights + 1)
        flat = np.zeros(max_lights, dtype=bool)
        flat[:num_on] = True
        rng.shuffle(flat)
        states.append(flat.reshape(rows, cols))

    return states


def _task_seed(base_seed: int, *coords: int) -> int:
    """Generate deterministic seed for each task."""
    ss = np.random.SeedSequence([int(base_seed)] + [int(c) for c in coords])

    return int(
        ss.generate_state(1, dtype=np.uint64)[0] & np.uint64((1 << 63) - 1)
    )


def make_batches(grids_by_size, strat_specs, batch_size):
    """Create job batches for parallel processing."""
    for (rows, cols), grids in grids_by_size.items():
        ranges = [
            (i, min(i + batch_size, len(grids)))
            for i in range(0, len(grids), batch_size)
        ]
        for spec in strat_specs:
            for lo, hi in ranges:
                yield {
                    "rows": rows,
                    "cols": cols,
                    "strategy_spec": spec,
                    "idx_lo": lo,
                    "idx_hi": hi,
                    "grids": grids[lo:hi],
                }


def _run_batch(job):
    """Run one batch of simulations."""
    rows, cols = job["rows"], job["cols"]
    max_steps = job["budget_T"]
    base_seed = job["base_seed"]
    solver = Solver(**job["solver"])
    strat_name = job["strategy_spec"]["name"]
    strat_params = job["strategy_spec"]["params"] or {}
    simulator = Simulator()
    out = []

    for offset, grid in enumerate(job["grids"]):
        board_id = job["idx_lo"] + offset
        init = SecureBox(rows, cols, grid)

        run_rng = np.random.default_rng(
            _task_seed(base_seed, rows, cols, board_id, zlib.crc32(strat_name.encode()) & 0xFFFF)
        )
        strat = make_strategy(strat_name, rng=run_rng, solver=solver)
        strat.reset(rows, cols, params={"rng": run_rng, "solver": solver, **strat_params})

        is_solvable = not isinstance(solver.solve(init.snapshot()), Unsolvable)

        start_time = time.perf_counter()
        _, _, counts = simulator.run(init, strat, T=max_steps)
        time_ms = (time.perf_counter() - start_time) * 1000

        solved = int(success_within_budget(counts, max_steps))
        num_presses = int(presses_used(counts))
        out.append(
            {
                "rows": rows,
                "cols": cols,
                "strategy": strat_name,
                "seed": base_seed,
                "board_id": board_id,
                "initial_on": init.count_on(),
                "solvable": int(is_solvable),
                "solved": solved,
                "presses_used": num_presses,
                "time_ms": time_ms,
                "time_per_action_ms": time_ms / num_presses if num_presses > 0 else 0.0,
            }
        )
    return out


def run_pool(jobs, writer, workers, max_inflight=None, total_jobs=None):
    """Run jobs in parallel and write results as they complete."""
    ctx = mp.get_context("spawn")
    if max_inflight is None:
        max_inflight = workers * 3

    inflight = set()
    done = 0
    total_rows = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as ex:
        jobs_iter = iter(jobs)
        while len(inflight) < max_inflight:
            try:
                j = next(jobs_iter)
            except StopIteration:
                break
            inflight.add(ex.submit(_run_batch, j))

        while inflight:
            for fut in as_completed(inflight, timeout=None):
                inflight.remove(fut)
                try:
                    rows = fut.result()
                except Exception:
                    logger.exception("Worker failed")
                    raise
                writer.writerows(rows)
                done += 1
                total_rows += len(rows)

                elapsed = time.time() - start_time
                pct = done / total_jobs if total_jobs else 0.0
                print(
                    f"\r[progress] {done}/{total_jobs} batches ({pct:>6.1%}) | "
                    f"{total_rows:>7,} boards | "
                    f"elapsed: {int(elapsed // 60)}m {int(elapsed % 60)}s",
                    end="",
                    flush=True,
                )
                if done == total_jobs:
                    print()
                # Submit next job to keep inflight bounded
                try:
                    j = next(jobs_iter)
                    inflight.add(ex.submit(_run_batch, j))
                except StopIteration:
                    pass
                break  # re-enter as_completed with updated set


def main():
    n_cpus = os.cpu_count() or 1
    default_workers = max(n_cpus - 1, 1)

    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--config",
        default=str(ROOT / "experiments" / "configs" / "sweep_small.yaml"),
    )
    ap.add_argument("--out", default=None, help="Output CSV path")
    ap.add_argument(
        "--workers", type=int, default=default_workers, help="Number of workers"
    )
    ap.add_argument(
        "--batch-size", type=int, default=1000, help="Boards per batch"
    )
    ap.add_argument("--log-level", type=str.upper, choices=LEVELS, default="INFO")
    args = ap.parse_args()

    setup_logging(args.log_level, stream=sys.stdout)
    cfg = load_config(args.config)

    sizes = board_sizes(cfg)
    max_steps = int(cfg["budget_T"])
    n_samples = int(cfg["initial_states"]["n_samples"])
    base_seed = int(cfg["initial_states"].get("seed", 0))
    solver_cfg = {
        "method": cfg["solver"]["method"],
        "dense_limit": int(cfg["solver"]["dense_limit"]),
    }
    out_dir = Path(cfg["output_dir"])
    out_dir.mkdir(parents=True, exist_ok=True)
    out_csv = args.out or str(out_dir / "sweep.csv")

    strat_specs = parse_strategies(cfg["strategies"])

    rng = np.random.default_rng(base_seed)
    grids_by_size = {
        (r, c): sample_initial_states(r, c, n_samples, rng) for r, c in sizes
    }

    num_ranges = (n_samples + args.batch_size - 1) // args.batch_size
    total_jobs = num_ranges * len(strat_specs) * len(sizes)

    def job_stream():
        for j in make_batches(grids_by_size, strat_specs, args.batch_size):
            j.update(
                {"budget_T": max_steps, "base_seed": base_seed, "solver": solver_cfg}
            )
            yield j

    fieldnames = [
        "rows",
        "cols",
        "strategy",
        "seed",
        "board_id",
        "initial_on",
        "solvable",
        "solved",
        "presses_used",
        "time_ms",
        "time_per_action_ms",
    ]

    logger.info(
        "Starting %d batches (%d sizes x %d boards) with %d workers",
        total_jobs,
        len(sizes),
        n_samples,
        args.workers,
    )

    start_time = time.time()
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        run_pool(
            job_stream(),
            writer,
            workers=args.workers,
            max_inflight=args.workers * 3,
            total_jobs=total_jobs,
        )

    elapsed = time.time() - start_time
    logger.info("Done in %dm %ds, output: %s", int(elapsed / 60), int(elapsed % 60), out_csv)


if __name__ == "__main__":
    main()
