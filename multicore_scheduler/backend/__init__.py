"""
Backend package for the multicore scheduler simulator.
Contains the job queue, the scheduling controller and the trace driver.
"""

from .core import (
    Discipline, Job, SchedulerError, SchedulerStateError, SchedulerUsageError,
)
from .priqueue import OrderedJobQueue
from .schedulers import SchedulingController

__all__ = [
    'Discipline',
    'Job',
    'OrderedJobQueue',
    'SchedulerError',
    'SchedulerStateError',
    'SchedulerUsageError',
    'SchedulingController',
]
