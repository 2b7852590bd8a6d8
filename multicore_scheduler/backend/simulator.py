from __future__ import annotations

from typing import List, Optional, Dict, Union
from dataclasses import dataclass
import logging

from .core import Discipline
from .schedulers import SchedulingController
from .utils import JobSpec, EventLogger

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    jobs: List[JobSpec]
    cores: int
    discipline: str
    total_time: int
    completion_times: Dict[int, int]
    avg_waiting_time: float
    avg_turnaround_time: float
    avg_response_time: float
    logger: EventLogger


@dataclass
class _CoreRun:
    job_id: int
    started: int


def _validate(jobs: List[JobSpec], cores: int, discipline: Discipline, time_quantum: int) -> None:
    if cores <= 0:
        raise ValueError(f"cores must be positive, got {cores}")
    if discipline is Discipline.RR and time_quantum <= 0:
        raise ValueError(f"time quantum must be positive, got {time_quantum}")
    seen = set()
    for j in jobs:
        if j.arrival_time < 0 or j.run_time <= 0:
            raise ValueError(f"job {j.job_id}: arrival must be >= 0 and run time > 0")
        if j.job_id in seen:
            raise ValueError(f"duplicate job id {j.job_id}")
        seen.add(j.job_id)


def simulate(
    jobs: List[JobSpec],
    cores: int = 1,
    discipline: Union[Discipline, str] = Discipline.FCFS,
    time_quantum: int = 2,
    show_queue: bool = False,
) -> SimulationResult:
    """Replay ``jobs`` through a fresh controller and collect its statistics.

    The driver keeps its own record of what each core is executing and jumps
    from one event time to the next. At each instant completions are reported
    first, then quantum expirations (RR only), then arrivals in trace order.
    """
    discipline = Discipline.parse(discipline)
    _validate(jobs, cores, discipline, time_quantum)

    controller = SchedulingController()
    controller.start(cores, discipline)

    pending = sorted(jobs, key=lambda j: j.arrival_time)
    remaining: Dict[int, int] = {j.job_id: j.run_time for j in jobs}
    running: List[Optional[_CoreRun]] = [None] * cores
    completion_times: Dict[int, int] = {}
    events = EventLogger()
    time_now = 0
    rotating = discipline is Discipline.RR

    def place(core: int, job_id: int) -> None:
        running[core] = _CoreRun(job_id=job_id, started=time_now)
        events.log_process_event(time_now, job_id, "dispatch", core)

    def take_off(core: int, reason: str) -> int:
        run = running[core]
        remaining[run.job_id] -= time_now - run.started
        events.log_timeline_slice(run.started, time_now, run.job_id, core, reason)
        running[core] = None
        return run.job_id

    def snapshot() -> None:
        if show_queue:
            logger.info("t=%d: %s", time_now, controller.show_queue())

    logger.info("Simulating %d job(s) on %d core(s) with %s", len(jobs), cores, discipline.name)

    while pending or any(running):
        candidates = [pending[0].arrival_time] if pending else []
        for run in running:
            if run is None:
                continue
            candidates.append(run.started + remaining[run.job_id])
            if rotating:
                candidates.append(run.started + time_quantum)
        time_now = max(time_now, min(candidates))

        for core in range(cores):
            run = running[core]
            if run is not None and run.started + remaining[run.job_id] <= time_now:
                job_id = take_off(core, "finished")
                completion_times[job_id] = time_now
                events.log_process_event(time_now, job_id, "finish", core)
                successor = controller.job_finished(core, job_id, time_now)
                if successor is not None:
                    place(core, successor)
                snapshot()

        if rotating:
            for core in range(cores):
                run = running[core]
                if run is not None and time_now - run.started >= time_quantum:
                    job_id = take_off(core, "quantum")
                    events.log_process_event(time_now, job_id, "quantum", core)
                    successor = controller.quantum_expired(core, time_now)
                    if successor is not None:
                        place(core, successor)
                    snapshot()

        while pending and pending[0].arrival_time <= time_now:
            spec = pending.pop(0)
            events.log_process_event(time_now, spec.job_id, "arrive")
            core = controller.job_arrived(spec.job_id, time_now, spec.run_time, spec.priority)
            if core is not None:
                if running[core] is not None:
                    victim = take_off(core, "preempted")
                    events.log_process_event(time_now, victim, "preempt", core)
                place(core, spec.job_id)
            snapshot()

    result = SimulationResult(
        jobs=jobs,
        cores=cores,
        discipline=discipline.name,
        total_time=time_now,
        completion_times=completion_times,
        avg_waiting_time=controller.average_waiting_time(),
        avg_turnaround_time=controller.average_turnaround_time(),
        avg_response_time=controller.average_response_time(),
        logger=events,
    )
    controller.shut_down()
    logger.info("Finished at t=%d: wait %.2f, turnaround %.2f, response %.2f",
                result.total_time, result.avg_waiting_time,
                result.avg_turnaround_time, result.avg_response_time)
    return result
