"""Structured logging module for Movie Maker.

Provides configurable logging with JSON format support and file rotation,
plus job context tagging for worker threads.
"""

from moviemaker.logging.config import configure_logging
from moviemaker.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)
from moviemaker.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "clear_job_context",
    "configure_logging",
    "get_job_context",
    "job_context",
    "set_job_context",
]
