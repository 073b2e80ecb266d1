"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (request, config)
    20-29: Target/file errors
    30-39: Tool/dependency errors
    40-49: Operation errors
    50-59: Probe errors
"""

from enum import IntEnum

from moviemaker.exceptions import (
    EngineError,
    InvalidNameError,
    JobCancelledError,
    NotFoundError,
    RequestValidationError,
    ResourceExhaustedError,
)


class ExitCode(IntEnum):
    """Exit codes for moviemaker CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Validation errors (10-19)
    INVALID_REQUEST = 10
    CONFIG_ERROR = 11

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    INVALID_NAME = 21

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    RESOURCE_EXHAUSTED = 41
    JOB_CANCELLED = 42

    # Probe errors (50-59)
    PARSE_ERROR = 51


def exit_code_for(error: Exception) -> ExitCode:
    """Map a domain error to the exit code a command should return."""
    if isinstance(error, NotFoundError):
        return ExitCode.TARGET_NOT_FOUND
    if isinstance(error, InvalidNameError):
        return ExitCode.INVALID_NAME
    if isinstance(error, RequestValidationError):
        return ExitCode.INVALID_REQUEST
    if isinstance(error, ResourceExhaustedError):
        return ExitCode.RESOURCE_EXHAUSTED
    if isinstance(error, JobCancelledError):
        return ExitCode.JOB_CANCELLED
    if isinstance(error, EngineError):
        return ExitCode.OPERATION_FAILED
    return ExitCode.GENERAL_ERROR
