"""Unit tests for jobs/models.py."""

from pathlib import Path

import pytest

from moviemaker.editing import TrimRequest
from moviemaker.executor.command import build_plan
from moviemaker.jobs.models import InvalidTransitionError, Job, JobStatus


@pytest.fixture
def job() -> Job:
    plan = build_plan(
        TrimRequest("a.mp4", 0, 1), [Path("/u/a.mp4")], Path("/o"), token="T"
    )
    return Job(job_id="abc123", plan=plan)


class TestJobStatus:
    """Tests for JobStatus."""

    def test_terminal_states(self) -> None:
        assert not JobStatus.QUEUED.is_terminal
        assert not JobStatus.RUNNING.is_terminal
        assert JobStatus.SUCCEEDED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert JobStatus.CANCELLED.is_terminal


class TestJobTransition:
    """Tests for Job.transition()."""

    def test_happy_path_stamps_times(self, job: Job) -> None:
        assert job.started_at is None

        job.transition(JobStatus.RUNNING)
        assert job.started_at is not None
        assert job.completed_at is None

        job.transition(JobStatus.SUCCEEDED)
        assert job.completed_at is not None

    def test_queued_can_be_cancelled(self, job: Job) -> None:
        job.transition(JobStatus.CANCELLED)
        assert job.status is JobStatus.CANCELLED
        assert job.completed_at is not None

    @pytest.mark.parametrize(
        "path",
        [
            [JobStatus.SUCCEEDED],
            [JobStatus.RUNNING, JobStatus.CANCELLED],
            [JobStatus.RUNNING, JobStatus.FAILED, JobStatus.SUCCEEDED],
            [JobStatus.CANCELLED, JobStatus.RUNNING],
        ],
    )
    def test_illegal_transitions(self, job: Job, path: list[JobStatus]) -> None:
        with pytest.raises(InvalidTransitionError):
            for status in path:
                job.transition(status)


class TestJobToDict:
    """Tests for Job.to_dict()."""

    def test_shape(self, job: Job) -> None:
        data = job.to_dict()

        assert data["jobId"] == "abc123"
        assert data["operation"] == "trim"
        assert data["status"] == "queued"
        assert data["outputFile"] == "trimmed-T-a.mp4"
        assert data["createdAt"].endswith("Z")
        assert data["startedAt"] is None
        assert data["error"] is None
