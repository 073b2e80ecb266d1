"""Exception types shared across Movie Maker.

Every error raised by the stores, the probe adapter, the command builder,
the job executor and the orchestrator derives from MovieMakerError, so
callers can catch all domain errors with a single except clause.

Errors detected before a job is queued (NotFoundError, InvalidNameError,
RequestValidationError, ResourceExhaustedError) are raised synchronously.
EngineError is only delivered through a job handle or a probe call.
"""

from __future__ import annotations


class MovieMakerError(Exception):
    """Base exception for all Movie Maker errors."""


class NotFoundError(MovieMakerError):
    """Raised when a referenced asset or output does not exist.

    Attributes:
        kind: What was looked up ("asset" or "output").
        name: The name that did not resolve.
    """

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} not found: {name}")


class InvalidNameError(MovieMakerError):
    """Raised when a name is malformed or attempts path traversal.

    Attributes:
        name: The rejected name.
        reason: Short description of why it was rejected.
    """

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name {name!r}: {reason}")


class RequestValidationError(MovieMakerError):
    """Raised when an edit request is malformed or inconsistent."""


class ResourceExhaustedError(MovieMakerError):
    """Raised when the job backlog is full and a job cannot be queued.

    Attributes:
        backlog: The configured backlog limit that was hit.
    """

    def __init__(self, backlog: int) -> None:
        self.backlog = backlog
        super().__init__(
            f"Job queue is full ({backlog} jobs waiting); try again later"
        )


class EngineError(MovieMakerError):
    """Raised when the media engine fails or produces unusable output.

    Attributes:
        stderr_tail: Last part of the engine's error stream, for diagnostics.
        returncode: Engine exit code, or None if it never ran to completion.
    """

    def __init__(
        self,
        message: str,
        stderr_tail: str = "",
        returncode: int | None = None,
    ) -> None:
        self.stderr_tail = stderr_tail
        self.returncode = returncode
        super().__init__(message)


class JobCancelledError(EngineError):
    """Raised through a job handle when a running job was terminated."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} was cancelled")
