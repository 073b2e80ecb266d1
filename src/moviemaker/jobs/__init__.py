"""Job execution for Movie Maker.

- JobExecutor: bounded worker pool running invocation plans
- JobHandle: caller-side future for one job
- Job / JobStatus: per-job record and state machine
"""

from moviemaker.jobs.handle import JobHandle
from moviemaker.jobs.models import InvalidTransitionError, Job, JobStatus
from moviemaker.jobs.pool import JobExecutor

__all__ = [
    "InvalidTransitionError",
    "Job",
    "JobExecutor",
    "JobHandle",
    "JobStatus",
]
