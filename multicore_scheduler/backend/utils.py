from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
import json
import csv
import logging
import random

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class TraceFormatError(ValueError):
    """A trace file could not be turned into job specs."""


@dataclass
class JobSpec:
    job_id: int
    arrival_time: int
    run_time: int
    priority: int = 0
    color: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.color is None:
            # Generate a stable color from the job id
            rng = random.Random(hash(self.job_id) & 0xFFFFFFFF)
            r = rng.randint(50, 220)
            g = rng.randint(50, 220)
            b = rng.randint(50, 220)
            self.color = f"#{r:02x}{g:02x}{b:02x}"


class EventLogger:
    def __init__(self) -> None:
        self.process_events: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []

    def log_process_event(self, time_s: int, job_id: int, event: str, core: Optional[int] = None) -> None:
        self.process_events.append({
            "time": time_s,
            "job_id": job_id,
            "event": event,
            "core": core,
        })

    def log_timeline_slice(self, start: int, end: int, job_id: int, core: int, reason: Optional[str] = None) -> None:
        if end <= start:
            return
        self.timeline.append({
            "start": start,
            "end": end,
            "job_id": job_id,
            "core": core,
            "reason": reason,
        })

    def export_json(self, path: str) -> None:
        data = {
            "process_events": self.process_events,
            "timeline": self.timeline,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def export_csv(self, base_path_no_ext: str) -> None:
        with open(f"{base_path_no_ext}_events.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["time", "job_id", "event", "core"])
            writer.writeheader()
            for row in self.process_events:
                writer.writerow(row)
        with open(f"{base_path_no_ext}_timeline.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["start", "end", "job_id", "core", "reason"])
            writer.writeheader()
            for row in self.timeline:
                writer.writerow(row)


TRACE_COLUMNS = ["arrival_time", "run_time", "priority"]
KNOWN_COLUMNS = {"job_id", *TRACE_COLUMNS}


def _is_header(row: List[str]) -> bool:
    return any(str(value).strip().lower() in KNOWN_COLUMNS for value in row)


def load_trace(path: str) -> List[JobSpec]:
    """Read jobs from a CSV trace.

    Two layouts are accepted: a header row naming ``arrival_time``,
    ``run_time`` and optionally ``priority`` / ``job_id``, or headerless
    ``arrival,run,priority`` rows where the job id is the row number.
    """
    try:
        raw = pd.read_csv(path, header=None, dtype=str, comment="#",
                          skipinitialspace=True, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        return []
    except (OSError, pd.errors.ParserError) as e:
        raise TraceFormatError(f"cannot read trace {path}: {e}") from e

    raw = raw.dropna(how="all")
    if raw.empty:
        return []

    first = raw.iloc[0].tolist()
    if _is_header(first):
        df = raw.iloc[1:].copy()
        df.columns = [str(c).strip().lower() for c in first]
    else:
        df = raw.copy()
        df.columns = TRACE_COLUMNS[:len(df.columns)] + [f"extra_{i}" for i in range(max(0, len(df.columns) - 3))]

    missing = [c for c in ("arrival_time", "run_time") if c not in df.columns]
    if missing:
        raise TraceFormatError(f"trace {path} is missing column(s): {', '.join(missing)}")

    jobs: List[JobSpec] = []
    for i, values in enumerate(df.to_dict("records")):
        try:
            job_id = int(values["job_id"]) if "job_id" in values and pd.notna(values["job_id"]) else i
            arrival = int(values["arrival_time"])
            run_time = int(values["run_time"])
            priority = values.get("priority")
            priority = int(priority) if priority is not None and pd.notna(priority) else 0
        except (TypeError, ValueError) as e:
            raise TraceFormatError(f"trace {path}, job row {i}: {e}") from e
        if run_time <= 0 or arrival < 0:
            logger.warning("Skipping job row %d in %s: arrival=%d run_time=%d", i, path, arrival, run_time)
            continue
        jobs.append(JobSpec(job_id=job_id, arrival_time=arrival, run_time=run_time, priority=priority))

    ids = [j.job_id for j in jobs]
    if len(set(ids)) != len(ids):
        raise TraceFormatError(f"trace {path} has duplicate job ids")
    return jobs


def generate_workload(n: int, seed: int = 42, mean_interarrival: float = 2.0,
                      mean_run_time: float = 5.0, priorities: int = 5) -> List[JobSpec]:
    """Reproducible synthetic trace with exponential gaps and run times."""
    if n <= 0:
        return []
    rng = np.random.default_rng(seed)
    gaps = np.rint(rng.exponential(mean_interarrival, size=n)).astype(int)
    gaps[0] = 0
    arrivals = np.cumsum(gaps)
    run_times = np.maximum(1, np.rint(rng.exponential(mean_run_time, size=n))).astype(int)
    prios = rng.integers(0, priorities, size=n)
    return [
        JobSpec(job_id=i, arrival_time=int(arrivals[i]), run_time=int(run_times[i]), priority=int(prios[i]))
        for i in range(n)
    ]
