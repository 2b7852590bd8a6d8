from __future__ import annotations

import json
from dataclasses import dataclass, fields
from typing import Any, Dict, List

from .core import Discipline
from .utils import JobSpec, load_trace
from .simulator import simulate, SimulationResult


@dataclass
class SimulationConfig:
    cores: int = 1
    discipline: str = Discipline.FCFS.name
    quantum: int = 2
    show_queue: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.cores, bool) or not isinstance(self.cores, int) or self.cores <= 0:
            raise ValueError(f"cores must be a positive integer, got {self.cores!r}")
        if isinstance(self.quantum, bool) or not isinstance(self.quantum, int) or self.quantum <= 0:
            raise ValueError(f"quantum must be a positive integer, got {self.quantum!r}")
        self.discipline = Discipline.parse(self.discipline).name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        """Build a config from a mapping, ignoring keys it does not know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: str) -> SimulationConfig:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"config {path} must contain a JSON object")
    return SimulationConfig.from_dict(data)


class SchedulerKernel:
    """Runs job traces through the scheduling controller with a fixed config."""

    def __init__(self, config: SimulationConfig | None = None):
        self.config = config or SimulationConfig()

    def run(self, jobs: List[JobSpec]) -> SimulationResult:
        return simulate(
            jobs,
            cores=self.config.cores,
            discipline=self.config.discipline,
            time_quantum=self.config.quantum,
            show_queue=self.config.show_queue,
        )

    def run_trace(self, path: str) -> SimulationResult:
        return self.run(load_trace(path))
