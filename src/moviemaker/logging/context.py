"""Job context for structured logging.

Worker threads bind the worker id and the job id they are executing using
contextvars; JobContextFilter copies them onto every log record so that
lines emitted deep inside the executor can be traced back to a job.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)


def set_job_context(worker_id: str, job_id: str | None = None) -> None:
    """Set the current worker/job context."""
    _worker_id.set(worker_id)
    _job_id.set(job_id)


def clear_job_context() -> None:
    """Clear the current worker/job context."""
    _worker_id.set(None)
    _job_id.set(None)


def get_job_context() -> tuple[str | None, str | None]:
    """Get current context as (worker_id, job_id), either may be None."""
    return _worker_id.get(), _job_id.get()


@contextmanager
def job_context(
    worker_id: str, job_id: str | None = None
) -> Generator[None, None, None]:
    """Bind worker/job identifiers for the duration of the block.

    Example:
        with job_context("01", job.id):
            logger.info("Starting ffmpeg")  # Tagged [W01:ab12cd34]
    """
    old_worker_id = _worker_id.get()
    old_job_id = _job_id.get()
    try:
        set_job_context(worker_id, job_id)
        yield
    finally:
        _worker_id.set(old_worker_id)
        _job_id.set(old_job_id)


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds worker_id and job_id attributes for JSON output, plus a compact
    job_tag such as "[W01:ab12cd34] " for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, job_id = get_job_context()

        record.worker_id = worker_id
        record.job_id = job_id

        if worker_id:
            if job_id:
                record.job_tag = f"[W{worker_id}:{job_id[:8]}] "
            else:
                record.job_tag = f"[W{worker_id}] "
        else:
            record.job_tag = ""

        return True
