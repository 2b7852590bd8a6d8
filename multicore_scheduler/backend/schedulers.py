"""
Scheduling controller and the per-discipline job comparators.

The controller is driven by three events (arrival, completion, quantum
expiry). It owns the core table and the queue of waiting jobs, and keeps
remaining times up to date lazily: only when an event advances the clock.
"""

import logging
from typing import Callable, Dict, Optional, Union

from .core import (
    ControllerState, CoreTable, Discipline, Job, SchedulerStats,
    SchedulerStateError, SchedulerUsageError,
)
from .priqueue import OrderedJobQueue

logger = logging.getLogger(__name__)

IDLE_MARKER = -1


def _or_arrival(primary: float, a: Job, b: Job) -> float:
    return primary if primary != 0 else a.arrival_time - b.arrival_time


def compare_fcfs(a: Job, b: Job) -> float:
    return a.arrival_time - b.arrival_time


def compare_sjf(a: Job, b: Job) -> float:
    return _or_arrival(a.run_time - b.run_time, a, b)


def compare_psjf(a: Job, b: Job) -> float:
    return _or_arrival(a.remaining_time - b.remaining_time, a, b)


def compare_priority(a: Job, b: Job) -> float:
    """Lower priority value wins."""
    return _or_arrival(a.priority - b.priority, a, b)


def compare_round_robin(a: Job, b: Job) -> float:
    # Everything ties; the queue's FIFO tie-break does the rotation.
    return 0


COMPARATORS: Dict[Discipline, Callable[[Job, Job], float]] = {
    Discipline.FCFS: compare_fcfs,
    Discipline.SJF: compare_sjf,
    Discipline.PSJF: compare_psjf,
    Discipline.PRI: compare_priority,
    Discipline.PPRI: compare_priority,
    Discipline.RR: compare_round_robin,
}


class SchedulingController:
    """Decides which job runs on which core.

    Lifecycle is ``start() -> events... -> shut_down()``. Contract violations
    raise :class:`SchedulerUsageError` before any state is touched, so the
    controller stays usable afterwards.
    """

    def __init__(self):
        self.state = ControllerState.UNINITIALIZED
        self.discipline: Optional[Discipline] = None
        self.cores: Optional[CoreTable] = None
        self.queue: Optional[OrderedJobQueue[Job]] = None
        self.stats = SchedulerStats()
        self.current_time: int = 0
        self._cmp: Callable[[Job, Job], float] = compare_fcfs
        self._jobs: Dict[int, Job] = {}

    # ------------------------------------------------------------------
    # Contract checks
    # ------------------------------------------------------------------
    def _require_running(self, operation: str) -> None:
        if self.state is ControllerState.UNINITIALIZED:
            raise SchedulerStateError(f"{operation}() called before start()")
        if self.state is ControllerState.SHUT_DOWN:
            raise SchedulerStateError(f"{operation}() called after shut_down()")

    def _require_started(self, operation: str) -> None:
        if self.state is ControllerState.UNINITIALIZED:
            raise SchedulerStateError(f"{operation}() called before start()")

    def _check_time(self, time: int) -> None:
        if time < self.current_time:
            raise SchedulerUsageError(
                f"event at t={time} delivered after t={self.current_time}; the clock never runs backwards"
            )

    def _occupied_core(self, core_index: int) -> Job:
        if not self.cores.valid(core_index):
            raise SchedulerUsageError(f"core {core_index} does not exist (cores: {len(self.cores)})")
        job = self.cores.occupant(core_index)
        if job is None:
            raise SchedulerUsageError(f"core {core_index} is idle")
        return job

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, core_count: int, discipline: Union[Discipline, str]) -> None:
        """Allocate ``core_count`` idle cores and select the comparator."""
        if self.state is not ControllerState.UNINITIALIZED:
            raise SchedulerStateError("start() may only be called once")
        if isinstance(core_count, bool) or not isinstance(core_count, int) or core_count <= 0:
            raise SchedulerUsageError(f"core count must be a positive integer, got {core_count!r}")
        try:
            self.discipline = Discipline.parse(discipline)
        except ValueError as exc:
            raise SchedulerUsageError(str(exc)) from exc

        self._cmp = COMPARATORS[self.discipline]
        self.cores = CoreTable(core_count)
        self.queue = OrderedJobQueue(self._cmp)
        self.current_time = 0
        self.stats.reset()
        self._jobs.clear()
        self.state = ControllerState.RUNNING
        logger.info("Scheduler started: %d core(s), %s", core_count, self.discipline.name)

    def shut_down(self) -> None:
        """Discard every queued and running job and release the cores."""
        self._require_running("shut_down")
        queued = self.queue.clear()
        running = self.cores.clear()
        self._jobs.clear()
        self.cores = None
        self.state = ControllerState.SHUT_DOWN
        logger.info("Scheduler shut down at t=%d (%d queued, %d running discarded)",
                    self.current_time, len(queued), len(running))

    # ------------------------------------------------------------------
    # Time and placement helpers
    # ------------------------------------------------------------------
    def advance_clock(self, time: int) -> None:
        """Move the clock to ``time`` and settle bookkeeping for running jobs."""
        self._require_running("advance_clock")
        self._check_time(time)
        self.current_time = time
        for _, job in self.cores:
            if not job.dispatched and job.last_core_update_time != time:
                job.first_dispatch_time = job.last_core_update_time
                self.stats.record_response(job)
            job.remaining_time -= time - job.last_core_update_time
            job.last_core_update_time = time

    def _dispatch(self, core_index: int, job: Job) -> None:
        self.cores.place(core_index, job, self.current_time)
        logger.debug("t=%d: job %s -> core %d", self.current_time, job.job_id, core_index)

    def _requeue(self, core_index: int) -> Job:
        job = self.cores.evict(core_index)
        position = self.queue.insert(job)
        logger.debug("t=%d: job %s off core %d, queued at %d (remaining %d)",
                     self.current_time, job.job_id, core_index, position, job.remaining_time)
        return job

    def _dispatch_next(self, core_index: int) -> Optional[int]:
        job = self.queue.poll_front()
        if job is None:
            logger.debug("t=%d: core %d idle", self.current_time, core_index)
            return None
        self._dispatch(core_index, job)
        return job.job_id

    def _find_victim(self, job: Job) -> Optional[int]:
        """Core whose occupant ``job`` beats by the widest margin, if any."""
        best, victim = 0, None
        for index, occupant in self.cores:
            result = self._cmp(job, occupant)
            if result < best:
                best, victim = result, index
            elif result == best and victim is not None:
                # Equal margin: take the core from the most recent arrival.
                if self.cores.occupant(victim).arrival_time < occupant.arrival_time:
                    victim = index
        return victim

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def job_arrived(self, job_id: int, time: int, run_time: int, priority: int = 0) -> Optional[int]:
        """Admit a new job.

        Returns the core the job should run on (preempting that core's
        current job if it was busy), or None if it has to wait.
        """
        self._require_running("job_arrived")
        self._check_time(time)
        if job_id in self._jobs:
            raise SchedulerUsageError(f"job {job_id} is already in the system")

        self.advance_clock(time)
        job = Job(job_id=job_id, arrival_time=time, run_time=run_time, priority=priority)
        self._jobs[job_id] = job

        core_index = self.cores.free_core()
        if core_index is not None:
            self._dispatch(core_index, job)
            return core_index

        if self.discipline.preemptive:
            victim = self._find_victim(job)
            if victim is not None:
                evicted = self._requeue(victim)
                self._dispatch(victim, job)
                logger.debug("t=%d: job %s preempted job %s on core %d",
                             time, job_id, evicted.job_id, victim)
                return victim

        position = self.queue.insert(job)
        logger.debug("t=%d: job %s queued at position %d", time, job_id, position)
        return None

    def job_finished(self, core_index: int, job_id: int, time: int) -> Optional[int]:
        """Retire the job on ``core_index``; return the id of its successor or None."""
        self._require_running("job_finished")
        self._check_time(time)
        occupant = self._occupied_core(core_index)
        if occupant.job_id != job_id:
            raise SchedulerUsageError(
                f"core {core_index} is running job {occupant.job_id}, not job {job_id}"
            )

        self.advance_clock(time)
        self.cores.evict(core_index)
        del self._jobs[job_id]
        self.stats.record_completion(occupant, time)
        logger.debug("t=%d: job %s finished on core %d", time, job_id, core_index)
        return self._dispatch_next(core_index)

    def quantum_expired(self, core_index: int, time: int) -> Optional[int]:
        """Rotate the job on ``core_index`` back into the queue and pick the next one."""
        self._require_running("quantum_expired")
        self._check_time(time)
        self._occupied_core(core_index)

        self.advance_clock(time)
        self._requeue(core_index)
        return self._dispatch_next(core_index)

    # ------------------------------------------------------------------
    # Statistics and diagnostics
    # ------------------------------------------------------------------
    def average_waiting_time(self) -> float:
        self._require_started("average_waiting_time")
        return self.stats.get_avg_waiting_time()

    def average_turnaround_time(self) -> float:
        self._require_started("average_turnaround_time")
        return self.stats.get_avg_turnaround_time()

    def average_response_time(self) -> float:
        self._require_started("average_response_time")
        return self.stats.get_avg_response_time()

    def show_queue(self) -> str:
        """Every live job in scheduling order as ``id(core)``; -1 marks a waiting job."""
        self._require_running("show_queue")
        merged = OrderedJobQueue(self._cmp)
        for job in self.queue:
            merged.insert(job)
        placement = {}
        for index, job in self.cores:
            placement[job.job_id] = index
            merged.insert(job)
        return " ".join(
            f"{job.job_id}({placement.get(job.job_id, IDLE_MARKER)})" for job in merged
        )
