"""Unit tests for jobs/pool.py."""

import os
import threading
import time
from concurrent.futures import CancelledError
from pathlib import Path

import pytest

from moviemaker.editing import ConcatRequest, TrimRequest
from moviemaker.exceptions import (
    EngineError,
    JobCancelledError,
    RequestValidationError,
    ResourceExhaustedError,
)
from moviemaker.executor.command import build_plan
from moviemaker.executor.ffmpeg_base import RunResult
from moviemaker.jobs.models import JobStatus
from moviemaker.jobs.pool import JobExecutor
from moviemaker.storage.store import OutputStore

WAIT = 5.0


def _trim_plan(output_dir: Path, token: str | None = None):
    return build_plan(
        TrimRequest("file-1-a.mp4", 0, 1),
        [Path("/uploads/file-1-a.mp4")],
        output_dir,
        token=token,
    )


@pytest.fixture
def executors():
    """Track executors created by a test and shut them down afterwards."""
    created: list[JobExecutor] = []
    yield created
    for executor in created:
        executor.shutdown(wait=True, terminate_running=True)


@pytest.fixture
def make_executor(output_dir: Path, executors):
    def factory(runner, max_workers: int = 2, max_backlog: int = 16) -> JobExecutor:
        executor = JobExecutor(
            runner,
            OutputStore(output_dir),
            max_workers=max_workers,
            max_backlog=max_backlog,
        )
        executors.append(executor)
        return executor

    return factory


class ConcurrencyRunner:
    """Runner that records how many runs overlap."""

    def __init__(self, hold: float = 0.05) -> None:
        self.hold = hold
        self.current = 0
        self.peak = 0
        self._lock = threading.Lock()

    tool_path = Path("/usr/bin/ffmpeg")
    timeout = 30

    def run(self, cmd, description, cancel_event=None) -> RunResult:
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)
        time.sleep(self.hold)
        Path(cmd[-1]).write_bytes(b"x")
        with self._lock:
            self.current -= 1
        return RunResult(0, "")


class ExplodingRunner:
    tool_path = Path("/usr/bin/ffmpeg")
    timeout = 30

    def run(self, cmd, description, cancel_event=None) -> RunResult:
        raise RuntimeError("boom")


class TestJobExecutorInit:
    """Tests for constructor validation."""

    def test_rejects_zero_workers(self, fake_runner, output_dir: Path) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            JobExecutor(fake_runner, OutputStore(output_dir), max_workers=0)

    def test_rejects_zero_backlog(self, fake_runner, output_dir: Path) -> None:
        with pytest.raises(ValueError, match="max_backlog"):
            JobExecutor(fake_runner, OutputStore(output_dir), max_backlog=0)


class TestJobExecutorRun:
    """Tests for running jobs to completion."""

    def test_success_adopts_output(
        self, make_executor, fake_runner, output_dir: Path
    ) -> None:
        executor = make_executor(fake_runner)

        handle = executor.submit(_trim_plan(output_dir))
        artifact = handle.result(timeout=WAIT)

        assert handle.status is JobStatus.SUCCEEDED
        assert artifact.filename == handle.output_name
        assert artifact.path.read_bytes() == b"fake media"
        assert os.listdir(output_dir) == [handle.output_name]
        # ffmpeg wrote to a hidden temp path, not the final name
        assert Path(fake_runner.calls[0][-1]).name.startswith(".")

    def test_nonzero_exit_fails_and_cleans_up(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        runner = make_runner(returncode=1, stderr_tail="Invalid data found")
        executor = make_executor(runner)

        handle = executor.submit(_trim_plan(output_dir))
        with pytest.raises(EngineError) as exc_info:
            handle.result(timeout=WAIT)

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr_tail == "Invalid data found"
        assert handle.status is JobStatus.FAILED
        assert os.listdir(output_dir) == []

    def test_missing_output_fails(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        executor = make_executor(make_runner(write_output=False))

        handle = executor.submit(_trim_plan(output_dir))

        with pytest.raises(EngineError, match="does not exist"):
            handle.result(timeout=WAIT)
        assert OutputStore(output_dir).list() == []

    def test_empty_output_fails(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        executor = make_executor(make_runner(payload=b""))

        handle = executor.submit(_trim_plan(output_dir))

        with pytest.raises(EngineError, match="empty"):
            handle.result(timeout=WAIT)
        assert os.listdir(output_dir) == []

    def test_unexpected_error_becomes_engine_error(
        self, make_executor, output_dir: Path
    ) -> None:
        executor = make_executor(ExplodingRunner())

        handle = executor.submit(_trim_plan(output_dir))

        with pytest.raises(EngineError, match="boom"):
            handle.result(timeout=WAIT)
        assert handle.status is JobStatus.FAILED

    def test_concat_list_is_removed(
        self, make_executor, fake_runner, output_dir: Path
    ) -> None:
        executor = make_executor(fake_runner)
        plan = build_plan(
            ConcatRequest(("a.mp4", "b.mp4")),
            [Path("/u/a.mp4"), Path("/u/b.mp4")],
            output_dir,
        )

        executor.submit(plan).result(timeout=WAIT)

        cmd = fake_runner.calls[0]
        listing = Path(cmd[cmd.index("concat") + 4])
        assert listing.name == "inputs.txt"
        assert not listing.exists()

    def test_done_callback_receives_handle(
        self, make_executor, fake_runner, output_dir: Path
    ) -> None:
        executor = make_executor(fake_runner)
        seen = []
        done = threading.Event()

        handle = executor.submit(_trim_plan(output_dir))
        handle.add_done_callback(lambda h: (seen.append(h.status), done.set()))

        assert done.wait(WAIT)
        assert seen == [JobStatus.SUCCEEDED]


class TestJobExecutorLimits:
    """Tests for the worker cap and the bounded backlog."""

    def test_concurrency_never_exceeds_workers(
        self, make_executor, output_dir: Path
    ) -> None:
        runner = ConcurrencyRunner()
        executor = make_executor(runner, max_workers=2)

        handles = [executor.submit(_trim_plan(output_dir)) for _ in range(6)]
        for handle in handles:
            handle.result(timeout=WAIT)

        assert runner.peak <= 2
        assert len(OutputStore(output_dir).list()) == 6

    def test_full_backlog_rejects(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        runner = make_runner(gate=gate)
        executor = make_executor(runner, max_workers=1, max_backlog=1)

        first = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)
        second = executor.submit(_trim_plan(output_dir))

        with pytest.raises(ResourceExhaustedError) as exc_info:
            executor.submit(_trim_plan(output_dir))
        assert exc_info.value.backlog == 1

        gate.set()
        first.result(timeout=WAIT)
        second.result(timeout=WAIT)

    def test_cancelled_jobs_release_backlog_slots(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        runner = make_runner(gate=gate)
        executor = make_executor(runner, max_workers=1, max_backlog=2)

        running = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)
        queued = [executor.submit(_trim_plan(output_dir)) for _ in range(2)]
        with pytest.raises(ResourceExhaustedError):
            executor.submit(_trim_plan(output_dir))

        for handle in queued:
            assert executor.cancel(handle.job_id)
        refill = [executor.submit(_trim_plan(output_dir)) for _ in range(2)]
        with pytest.raises(ResourceExhaustedError):
            executor.submit(_trim_plan(output_dir))

        gate.set()
        running.result(timeout=WAIT)
        for handle in refill:
            handle.result(timeout=WAIT)
        assert len(OutputStore(output_dir).list()) == 3

    def test_duplicate_output_name_rejected(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        executor = make_executor(make_runner(gate=gate))

        first = executor.submit(_trim_plan(output_dir, token="T"))
        with pytest.raises(RequestValidationError, match="already being produced"):
            executor.submit(_trim_plan(output_dir, token="T"))

        gate.set()
        first.result(timeout=WAIT)

    def test_active_jobs_snapshot(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        runner = make_runner(gate=gate)
        executor = make_executor(runner, max_workers=1)

        first = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)
        second = executor.submit(_trim_plan(output_dir))

        jobs = executor.active_jobs()
        assert [j.job_id for j in jobs] == [first.job_id, second.job_id]
        assert jobs[0].status is JobStatus.RUNNING
        assert jobs[0].worker_id == "01"
        assert jobs[1].status is JobStatus.QUEUED

        gate.set()
        second.result(timeout=WAIT)
        assert executor.active_jobs() == []


class TestJobExecutorCancel:
    """Tests for cancellation."""

    def test_cancel_queued_job(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        runner = make_runner(gate=gate)
        executor = make_executor(runner, max_workers=1)

        first = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)
        second = executor.submit(_trim_plan(output_dir))

        assert second.cancel() is True
        assert second.status is JobStatus.CANCELLED
        with pytest.raises(CancelledError):
            second.result(timeout=WAIT)

        gate.set()
        first.result(timeout=WAIT)
        # Give the worker a chance to pop the discarded entry
        time.sleep(0.1)
        assert len(runner.calls) == 1
        assert [o.filename for o in OutputStore(output_dir).list()] == [
            first.output_name
        ]

    def test_cancel_running_job(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        runner = make_runner(gate=threading.Event())
        executor = make_executor(runner)

        handle = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)

        assert handle.cancel() is True
        with pytest.raises(JobCancelledError):
            handle.result(timeout=WAIT)
        assert handle.status is JobStatus.FAILED
        assert os.listdir(output_dir) == []

    def test_cancel_finished_job(
        self, make_executor, fake_runner, output_dir: Path
    ) -> None:
        executor = make_executor(fake_runner)
        handle = executor.submit(_trim_plan(output_dir))
        handle.result(timeout=WAIT)

        assert handle.cancel() is False
        assert executor.cancel("unknown") is False


class TestJobExecutorShutdown:
    """Tests for shutdown()."""

    def test_submit_after_shutdown(
        self, make_executor, fake_runner, output_dir: Path
    ) -> None:
        executor = make_executor(fake_runner)
        executor.start()
        executor.shutdown()

        assert executor.is_shutdown
        with pytest.raises(RuntimeError, match="shutdown"):
            executor.submit(_trim_plan(output_dir))

    def test_shutdown_discards_backlog(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        gate = threading.Event()
        runner = make_runner(gate=gate)
        executor = make_executor(runner, max_workers=1)

        running = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)
        queued = executor.submit(_trim_plan(output_dir))

        executor.shutdown(wait=False)
        assert queued.status is JobStatus.CANCELLED

        gate.set()
        executor.shutdown(wait=True)
        assert running.result(timeout=WAIT).filename == running.output_name
        assert len(runner.calls) == 1

    def test_second_call_terminates_running(
        self, make_executor, make_runner, output_dir: Path
    ) -> None:
        runner = make_runner(gate=threading.Event())
        executor = make_executor(runner)

        handle = executor.submit(_trim_plan(output_dir))
        assert runner.started.wait(WAIT)

        executor.shutdown(wait=False)
        assert not handle.done()
        executor.shutdown(wait=True, terminate_running=True)

        with pytest.raises(JobCancelledError):
            handle.result(timeout=WAIT)
