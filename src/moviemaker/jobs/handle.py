"""Caller-side handle for a submitted job."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import TYPE_CHECKING

from moviemaker.domain.models import OutputArtifact
from moviemaker.jobs.models import Job, JobStatus

if TYPE_CHECKING:
    from moviemaker.jobs.pool import JobExecutor


class JobHandle:
    """Await, inspect or cancel one job.

    The terminal result is delivered exactly once through a
    concurrent.futures.Future: an OutputArtifact on success, or an
    exception (EngineError, JobCancelledError) on failure. Async callers
    can await ``asyncio.wrap_future(handle.future)``.
    """

    def __init__(
        self, job: Job, future: Future[OutputArtifact], executor: JobExecutor
    ) -> None:
        self._job = job
        self._future = future
        self._executor = executor

    def __repr__(self) -> str:
        return f"<JobHandle {self.job_id} {self.status.value}>"

    @property
    def job_id(self) -> str:
        return self._job.job_id

    @property
    def status(self) -> JobStatus:
        return self._job.status

    @property
    def output_name(self) -> str:
        return self._job.output_name

    @property
    def future(self) -> Future[OutputArtifact]:
        return self._future

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> OutputArtifact:
        """Block until the job finishes and return its artifact.

        Raises:
            EngineError: If the job failed (JobCancelledError if a running
                job was terminated on request).
            concurrent.futures.CancelledError: If the job was discarded
                while still queued.
            TimeoutError: If timeout elapsed first.
        """
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        return self._future.exception(timeout)

    def cancel(self) -> bool:
        """Request cancellation.

        A queued job is discarded. A running job has its engine process
        terminated and then fails with JobCancelledError. Returns False if
        the job had already finished.
        """
        return self._executor.cancel(self._job.job_id)

    def add_done_callback(self, fn: Callable[[JobHandle], object]) -> None:
        """Call fn(handle) when the job reaches a terminal state."""
        self._future.add_done_callback(lambda _future: fn(self))
