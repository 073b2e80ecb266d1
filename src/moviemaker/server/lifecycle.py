"""Uptime and shutdown bookkeeping for `moviemaker serve`.

A signal starts the shutdown clock; the executor cleanup hook then spends
whatever is left of the grace period waiting for running jobs before it
terminates them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from moviemaker.core.datetime_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ShutdownState:
    """When shutdown began and when running jobs stop being waited for."""

    initiated: datetime | None = None
    deadline: datetime | None = None

    @property
    def is_shutting_down(self) -> bool:
        return self.initiated is not None

    def seconds_remaining(self) -> float | None:
        """Seconds left before the deadline, never negative.

        None while no shutdown is in progress.
        """
        if self.deadline is None:
            return None
        return max(0.0, (self.deadline - utc_now()).total_seconds())


@dataclass
class DaemonLifecycle:
    """Server start time plus the shutdown clock shared by signal handling,
    the health check and executor cleanup."""

    shutdown_timeout: float = 30.0
    start_time: datetime = field(default_factory=utc_now)
    shutdown_state: ShutdownState = field(default_factory=ShutdownState)

    @property
    def uptime_seconds(self) -> float:
        return (utc_now() - self.start_time).total_seconds()

    @property
    def is_shutting_down(self) -> bool:
        return self.shutdown_state.is_shutting_down

    def initiate_shutdown(self) -> None:
        """Start the shutdown clock. Later calls keep the first deadline."""
        state = self.shutdown_state
        if state.is_shutting_down:
            return
        state.initiated = utc_now()
        state.deadline = state.initiated + timedelta(seconds=self.shutdown_timeout)
        logger.info("Shutdown initiated (grace period %.0fs)", self.shutdown_timeout)

    def grace_period(self) -> float:
        """Seconds running jobs may still take before being terminated.

        Counts down from the moment shutdown was initiated; before that it
        is the full shutdown timeout.
        """
        remaining = self.shutdown_state.seconds_remaining()
        return self.shutdown_timeout if remaining is None else remaining
