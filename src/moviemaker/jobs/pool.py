"""Bounded worker pool that runs invocation plans.

JobExecutor owns a fixed set of worker threads and a bounded FIFO backlog.
The worker count is a hard cap on concurrent ffmpeg processes; a full
backlog rejects new work with ResourceExhaustedError instead of queueing
without limit.

Every job writes to a hidden temp file in the output directory. The file
is adopted into the OutputStore only after ffmpeg exits 0 and the output
validates; on any failure it is deleted, so a failed job never leaves a
listed artifact behind.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Protocol

from moviemaker.domain.models import OutputArtifact
from moviemaker.exceptions import (
    EngineError,
    JobCancelledError,
    MovieMakerError,
    RequestValidationError,
    ResourceExhaustedError,
)
from moviemaker.executor.command import build_ffmpeg_args
from moviemaker.executor.ffmpeg_base import RunResult
from moviemaker.executor.ffmpeg_utils import (
    cleanup_temp_file,
    remove_concat_list,
    validate_output,
    write_concat_list,
)
from moviemaker.executor.types import InvocationPlan
from moviemaker.jobs.handle import JobHandle
from moviemaker.jobs.models import Job, JobStatus
from moviemaker.logging.context import job_context
from moviemaker.storage.store import OutputStore

logger = logging.getLogger(__name__)


class Runner(Protocol):
    """What the executor needs from FFmpegRunner."""

    @property
    def tool_path(self) -> Path: ...

    @property
    def timeout(self) -> int: ...

    def run(
        self,
        cmd: list[str],
        description: str,
        cancel_event: threading.Event | None = None,
    ) -> RunResult: ...


@dataclass
class _Entry:
    job: Job
    future: Future[OutputArtifact]
    cancel_event: threading.Event = field(default_factory=threading.Event)


class JobExecutor:
    """Run invocation plans on a bounded pool of worker threads."""

    IDLE_POLL: float = 0.5  # Seconds an idle worker waits before checking shutdown

    def __init__(
        self,
        runner: Runner,
        output_store: OutputStore,
        max_workers: int = 2,
        max_backlog: int = 16,
    ) -> None:
        """Initialize the executor.

        Args:
            runner: Spawns and supervises one ffmpeg process per call.
            output_store: Store finished outputs are adopted into.
            max_workers: Maximum concurrent ffmpeg processes.
            max_backlog: Maximum jobs waiting for a worker.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if max_backlog < 1:
            raise ValueError(f"max_backlog must be >= 1, got {max_backlog}")

        self._runner = runner
        self._outputs = output_store
        self._max_workers = max_workers
        self._max_backlog = max_backlog

        # Cancelled entries linger in the queue until a worker discards them,
        # so the backlog limit is enforced on _pending rather than qsize().
        self._queue: queue.Queue[_Entry] = queue.Queue()
        self._pending = 0
        self._active: dict[str, _Entry] = {}
        self._lock = threading.RLock()
        self._workers: list[threading.Thread] = []
        self._started = False
        self._shutdown = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def max_backlog(self) -> int:
        return self._max_backlog

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def start(self) -> None:
        """Start the worker threads. Calling it again is a no-op."""
        with self._lock:
            if self._started or self._shutdown:
                return
            self._started = True
            for index in range(1, self._max_workers + 1):
                worker_id = f"{index:02d}"
                thread = threading.Thread(
                    target=self._worker_loop,
                    args=(worker_id,),
                    name=f"moviemaker-worker-{worker_id}",
                    daemon=True,
                )
                thread.start()
                self._workers.append(thread)
        logger.info(
            "Job executor started (%d workers, backlog %d)",
            self._max_workers,
            self._max_backlog,
        )

    def submit(self, plan: InvocationPlan) -> JobHandle:
        """Queue a plan for execution.

        Raises:
            ResourceExhaustedError: If the backlog is full.
            RequestValidationError: If another active job already targets
                the same output name.
            RuntimeError: If the executor has been shut down.
        """
        self.start()
        job = Job(job_id=uuid.uuid4().hex, plan=plan)
        entry = _Entry(job=job, future=Future())

        with self._lock:
            if self._shutdown:
                raise RuntimeError("Cannot submit jobs after shutdown")
            for other in self._active.values():
                if other.job.output_name == plan.output_name:
                    raise RequestValidationError(
                        f"Output {plan.output_name} is already being produced"
                    )
            if self._pending >= self._max_backlog:
                logger.warning(
                    "Rejected %s job: backlog full (%d)",
                    plan.operation.value,
                    self._max_backlog,
                )
                raise ResourceExhaustedError(self._max_backlog)
            self._queue.put_nowait(entry)
            self._pending += 1
            self._active[job.job_id] = entry

        logger.info("Queued job %s: %s", job.job_id[:8], plan.describe())
        return JobHandle(job, entry.future, self)

    def cancel(self, job_id: str) -> bool:
        """Cancel a queued or running job.

        Returns:
            True if the job was discarded or its termination was requested,
            False if it is unknown or already finished.
        """
        with self._lock:
            entry = self._active.get(job_id)
            if entry is None:
                return False
            if entry.future.done():
                return False
            # Workers claim jobs under this lock, so a pending future
            # cannot start running between these checks.
            if not entry.future.running():
                entry.job.transition(JobStatus.CANCELLED)
                self._active.pop(job_id, None)
                self._pending -= 1
                entry.future.cancel()
                logger.info("Cancelled queued job %s", job_id[:8])
                return True
            entry.cancel_event.set()
        logger.info("Termination requested for running job %s", job_id[:8])
        return True

    def active_jobs(self) -> list[Job]:
        """Snapshots of all queued and running jobs, oldest first."""
        with self._lock:
            jobs = [replace(entry.job) for entry in self._active.values()]
        return sorted(jobs, key=lambda job: job.created_at)

    def shutdown(
        self,
        wait: bool = True,
        cancel_pending: bool = True,
        terminate_running: bool = False,
    ) -> None:
        """Stop accepting work and stop the workers.

        Calling it again after the first call may still terminate running
        jobs or wait for the workers; the backlog is only handled once.

        Args:
            wait: Block until worker threads have exited.
            cancel_pending: Discard jobs still waiting in the backlog.
                Otherwise workers finish the backlog before exiting.
            terminate_running: Terminate ffmpeg processes already running.
        """
        with self._lock:
            first_call = not self._shutdown
            self._shutdown = True

        if first_call and cancel_pending:
            cancelled = 0
            while True:
                try:
                    entry = self._queue.get_nowait()
                except queue.Empty:
                    break
                self._queue.task_done()
                if self.cancel(entry.job.job_id):
                    cancelled += 1
            if cancelled:
                logger.info("Cancelled %d pending job(s) on shutdown", cancelled)

        if terminate_running:
            with self._lock:
                running = [e for e in self._active.values() if e.future.running()]
            for entry in running:
                entry.cancel_event.set()
            if running:
                logger.info("Terminating %d running job(s)", len(running))

        if wait:
            for thread in self._workers:
                thread.join()
            logger.info("Job executor stopped")

    def _worker_loop(self, worker_id: str) -> None:
        while True:
            try:
                entry = self._queue.get(timeout=self.IDLE_POLL)
            except queue.Empty:
                if self._shutdown:
                    return
                continue
            try:
                with job_context(worker_id, entry.job.job_id):
                    self._run_entry(entry, worker_id)
            finally:
                self._queue.task_done()

    def _run_entry(self, entry: _Entry, worker_id: str) -> None:
        job = entry.job
        with self._lock:
            if not entry.future.set_running_or_notify_cancel():
                # Discarded while queued; cancel() already released its slot
                self._active.pop(job.job_id, None)
                return
            self._pending -= 1
            job.worker_id = worker_id
            job.transition(JobStatus.RUNNING)

        logger.info("Starting %s", job.plan.describe())
        try:
            artifact = self._execute(entry)
        except Exception as e:
            error = e if isinstance(e, MovieMakerError) else EngineError(
                f"Unexpected error running job: {e}"
            )
            with self._lock:
                job.error_message = str(error)
                job.transition(JobStatus.FAILED)
                self._active.pop(job.job_id, None)
            if isinstance(error, JobCancelledError):
                logger.info("Job cancelled while running")
            else:
                logger.error("Job failed: %s", error)
            entry.future.set_exception(error)
        else:
            with self._lock:
                job.transition(JobStatus.SUCCEEDED)
                self._active.pop(job.job_id, None)
            logger.info("Job succeeded: %s (%d bytes)", artifact.filename, artifact.size)
            entry.future.set_result(artifact)

    def _execute(self, entry: _Entry) -> OutputArtifact:
        job = entry.job
        plan = job.plan
        temp_path = self._outputs.temp_path_for(plan.output_name)
        concat_list = None
        try:
            if plan.is_concat:
                concat_list = write_concat_list(plan.inputs)
            cmd = build_ffmpeg_args(
                plan,
                self._runner.tool_path,
                output_path=temp_path,
                concat_list=concat_list,
            )
            result = self._runner.run(
                cmd, f"{plan.operation.value} job", entry.cancel_event
            )

            if result.cancelled:
                raise JobCancelledError(job.job_id)
            if result.timed_out:
                raise EngineError(
                    f"ffmpeg timed out after {self._runner.timeout}s",
                    stderr_tail=result.stderr_tail,
                )
            if result.returncode != 0:
                raise EngineError(
                    f"ffmpeg exited with code {result.returncode}",
                    stderr_tail=result.stderr_tail,
                    returncode=result.returncode,
                )

            valid, message = validate_output(temp_path)
            if not valid:
                raise EngineError(
                    message or "ffmpeg produced no output",
                    stderr_tail=result.stderr_tail,
                    returncode=result.returncode,
                )
            return self._outputs.adopt(temp_path, plan.output_name)
        finally:
            cleanup_temp_file(temp_path)
            if concat_list is not None:
                remove_concat_list(concat_list)
