"""Job records and their state machine.

Queued -> Running -> Succeeded | Failed, plus Queued -> Cancelled for jobs
discarded before a worker claimed them. Terminal states are final.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from moviemaker.core.datetime_utils import to_iso_utc, utc_now
from moviemaker.domain.enums import Operation
from moviemaker.executor.types import InvocationPlan


class JobStatus(Enum):
    """Status of a job in the executor."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED})

_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING, JobStatus.CANCELLED}),
    JobStatus.RUNNING: frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED}),
}


class InvalidTransitionError(RuntimeError):
    """Raised on an illegal job state change."""

    def __init__(self, job_id: str, current: JobStatus, target: JobStatus) -> None:
        self.job_id = job_id
        self.current = current
        self.target = target
        super().__init__(
            f"Job {job_id} cannot move from {current.value} to {target.value}"
        )


@dataclass
class Job:
    """The execution of one edit request.

    Only the job executor mutates a Job, always under its lock.
    """

    job_id: str
    plan: InvocationPlan
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=utc_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    worker_id: str | None = None
    error_message: str | None = None

    @property
    def operation(self) -> Operation:
        return self.plan.operation

    @property
    def output_name(self) -> str:
        return self.plan.output_name

    def transition(self, target: JobStatus) -> None:
        """Move to a new status, stamping start/completion times.

        Raises:
            InvalidTransitionError: If the move is not allowed.
        """
        if target not in _TRANSITIONS.get(self.status, frozenset()):
            raise InvalidTransitionError(self.job_id, self.status, target)
        self.status = target
        if target is JobStatus.RUNNING:
            self.started_at = utc_now()
        elif target.is_terminal:
            self.completed_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobId": self.job_id,
            "operation": self.operation.value,
            "status": self.status.value,
            "outputFile": self.output_name,
            "createdAt": to_iso_utc(self.created_at),
            "startedAt": to_iso_utc(self.started_at),
            "completedAt": to_iso_utc(self.completed_at),
            "error": self.error_message,
        }
