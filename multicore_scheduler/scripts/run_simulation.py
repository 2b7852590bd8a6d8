from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure repo root is on sys.path so this script can be executed directly
repo_root = Path(__file__).resolve().parents[2]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from multicore_scheduler.backend.core import Discipline
from multicore_scheduler.backend.utils import generate_workload, load_trace
from multicore_scheduler.backend.os_kernel import SimulationConfig, SchedulerKernel, load_config
from multicore_scheduler.backend.visualizer import plot_gantt


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Multicore CPU scheduling simulator")
    p.add_argument("--trace", type=str, default=None, help="CSV trace (arrival,run_time,priority per row)")
    p.add_argument("--n", type=int, default=10, help="Number of synthetic jobs when no trace is given")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--config", type=str, default=None, help="JSON file with cores/discipline/quantum")
    p.add_argument("--cores", type=int, default=None)
    p.add_argument("--discipline", choices=[d.name for d in Discipline], type=str.upper, default=None)
    p.add_argument("--quantum", type=int, default=None, help="Time quantum for RR")
    p.add_argument("--show-queue", action="store_true", help="Log the queue after every event")
    p.add_argument("--out", type=str, default=None, help="Write a Gantt chart PNG here")
    p.add_argument("--log-dir", type=str, default=None, help="Export event logs (JSON and CSV) here")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    config = load_config(args.config) if args.config else SimulationConfig()
    overrides = {
        "cores": args.cores,
        "discipline": args.discipline,
        "quantum": args.quantum,
        "show_queue": args.show_queue or None,
    }
    merged = {**vars(config), **{k: v for k, v in overrides.items() if v is not None}}
    return SimulationConfig.from_dict(merged)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
        jobs = load_trace(args.trace) if args.trace else generate_workload(args.n, args.seed)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = SchedulerKernel(config).run(jobs)

    print(f"{config.discipline} on {config.cores} core(s), {len(jobs)} job(s), finished at t={result.total_time}")
    print(f"Avg waiting: {result.avg_waiting_time:.3f}, Avg turnaround: {result.avg_turnaround_time:.3f}, "
          f"Avg response: {result.avg_response_time:.3f}")

    if args.log_dir:
        out = Path(args.log_dir)
        out.mkdir(parents=True, exist_ok=True)
        base = out / f"run_{config.discipline.lower()}_{config.cores}"
        result.logger.export_json(str(base.with_suffix(".json")))
        result.logger.export_csv(str(base))
        print(f"Logs written to {out} (base: {base.name})")
    if args.out:
        plot_gantt(result, args.out)
        print(f"Saved plot to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
