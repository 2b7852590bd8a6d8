"""
Core data structures for the multicore scheduler simulator.
Includes Job, the core table, scheduling disciplines and statistics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union


class SchedulerError(RuntimeError):
    """Base class for scheduler errors."""


class SchedulerUsageError(SchedulerError):
    """The caller broke the event contract (bad core, wrong job id, ...)."""


class SchedulerStateError(SchedulerUsageError):
    """Operation called before start() or after shut_down()."""


class Discipline(Enum):
    """Scheduling disciplines supported by the controller."""
    FCFS = "FCFS"
    SJF = "SJF"
    PSJF = "PSJF"
    PRI = "PRI"
    PPRI = "PPRI"
    RR = "RR"

    @property
    def preemptive(self) -> bool:
        return self in (Discipline.PSJF, Discipline.PPRI)

    @classmethod
    def parse(cls, value: Union["Discipline", str]) -> "Discipline":
        """Accept a member or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            names = ", ".join(d.name for d in cls)
            raise ValueError(f"unknown discipline {value!r} (expected one of {names})") from None


class ControllerState(Enum):
    """Lifecycle of a scheduling controller."""
    UNINITIALIZED = "UNINITIALIZED"
    RUNNING = "RUNNING"
    SHUT_DOWN = "SHUT_DOWN"


@dataclass(eq=False)
class Job:
    """A job known to the controller, either queued or on a core.

    Equality is identity: two jobs are equal only if they are the same object.
    """
    job_id: int
    arrival_time: int
    run_time: int
    priority: int = 0
    remaining_time: int = field(init=False)
    first_dispatch_time: Optional[int] = None
    last_core_update_time: Optional[int] = None

    def __post_init__(self):
        self.remaining_time = self.run_time

    @property
    def dispatched(self) -> bool:
        return self.first_dispatch_time is not None


class CoreTable:
    """Fixed-size array of core slots, each holding at most one job."""

    def __init__(self, count: int):
        self._slots: List[Optional[Job]] = [None] * count

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Tuple[int, Job]]:
        """Yield (core index, job) for every occupied slot."""
        for index, job in enumerate(self._slots):
            if job is not None:
                yield index, job

    def valid(self, index: int) -> bool:
        return 0 <= index < len(self._slots)

    def occupant(self, index: int) -> Optional[Job]:
        return self._slots[index]

    def free_core(self) -> Optional[int]:
        """Lowest-indexed empty slot, or None if every core is busy."""
        for index, job in enumerate(self._slots):
            if job is None:
                return index
        return None

    def place(self, index: int, job: Job, now: int) -> None:
        if self._slots[index] is not None:
            raise SchedulerUsageError(f"core {index} is already running job {self._slots[index].job_id}")
        self._slots[index] = job
        job.last_core_update_time = now

    def evict(self, index: int) -> Optional[Job]:
        job = self._slots[index]
        self._slots[index] = None
        if job is not None:
            job.last_core_update_time = None
        return job

    def clear(self) -> List[Job]:
        jobs = [job for _, job in self]
        self._slots = [None] * len(self._slots)
        return jobs


class SchedulerStats:
    """Running sums and counts for the three timing statistics."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.total_waiting_time = 0.0
        self.total_turnaround_time = 0.0
        self.total_response_time = 0.0
        self.waiting_samples = 0
        self.turnaround_samples = 0
        self.response_samples = 0

    def record_completion(self, job: Job, completion_time: int) -> None:
        """Record wait and turnaround samples for a finished job."""
        turnaround = completion_time - job.arrival_time
        self.total_turnaround_time += turnaround
        self.turnaround_samples += 1
        self.total_waiting_time += turnaround - job.run_time
        self.waiting_samples += 1

    def record_response(self, job: Job) -> None:
        self.total_response_time += job.first_dispatch_time - job.arrival_time
        self.response_samples += 1

    @staticmethod
    def _average(total: float, count: int) -> float:
        return total / count if count else 0.0

    def get_avg_waiting_time(self) -> float:
        return self._average(self.total_waiting_time, self.waiting_samples)

    def get_avg_turnaround_time(self) -> float:
        return self._average(self.total_turnaround_time, self.turnaround_samples)

    def get_avg_response_time(self) -> float:
        return self._average(self.total_response_time, self.response_samples)
