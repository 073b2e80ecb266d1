"""HTTP application for `moviemaker serve`.

This module provides the aiohttp Application with the health check, the
JSON API, static access to stored files, and executor lifecycle hooks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass

from aiohttp import web

from moviemaker import __version__
from moviemaker.config.models import MovieMakerConfig
from moviemaker.editing.orchestrator import EditOrchestrator
from moviemaker.server.api import setup_api_routes
from moviemaker.server.api.middleware import error_middleware
from moviemaker.server.lifecycle import DaemonLifecycle

logger = logging.getLogger(__name__)

# Allowance for multipart framing on top of the upload limit
MULTIPART_OVERHEAD = 1024 * 1024


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy' or 'unhealthy'."""

    uptime_seconds: float
    """Seconds since server startup."""

    version: str
    """Movie Maker version string."""

    shutting_down: bool = False
    """True if graceful shutdown is in progress."""

    jobs_queued: int = 0
    """Number of jobs waiting for a worker."""

    jobs_running: int = 0
    """Number of jobs currently running."""

    max_workers: int = 0
    """Configured worker pool size."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def create_app(
    orchestrator: EditOrchestrator | None = None,
    config: MovieMakerConfig | None = None,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        orchestrator: Orchestrator to serve. Built from config when None.
        config: Configuration; defaults to built-in defaults.

    Returns:
        Configured aiohttp Application instance.
    """
    config = config or MovieMakerConfig()
    if orchestrator is None:
        orchestrator = EditOrchestrator.from_config(config)

    app = web.Application(
        client_max_size=config.upload.max_bytes + MULTIPART_OVERHEAD,
        middlewares=[error_middleware],
    )

    app["config"] = config
    app["upload_config"] = config.upload
    app["orchestrator"] = orchestrator
    app["lifecycle"] = None  # Set by serve command

    app.router.add_get("/", root_handler)
    app.router.add_get("/health", health_handler)
    setup_api_routes(app)

    app.router.add_static("/uploads", orchestrator.assets.root, name="uploads")
    app.router.add_static("/output", orchestrator.outputs.root, name="output")

    app.on_startup.append(_start_executor)
    app.on_cleanup.append(_stop_executor)

    return app


async def _start_executor(app: web.Application) -> None:
    """Start the job executor workers."""
    orchestrator: EditOrchestrator = app["orchestrator"]
    orchestrator.start()


async def _stop_executor(app: web.Application) -> None:
    """Stop the job executor, terminating jobs still running at the deadline.

    Under `moviemaker serve` the deadline is the one the shutdown signal
    started; without a lifecycle the full configured timeout applies.
    """
    orchestrator: EditOrchestrator = app["orchestrator"]
    lifecycle: DaemonLifecycle | None = app.get("lifecycle")
    if lifecycle is not None:
        grace = lifecycle.grace_period()
    else:
        grace = app["config"].server.shutdown_timeout

    # Stop intake and discard the backlog before waiting on running jobs
    await asyncio.to_thread(orchestrator.shutdown, wait=False)
    if grace > 0:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(orchestrator.shutdown, wait=True),
                timeout=grace,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Running jobs did not finish within %.0fs; terminating", grace
            )
        else:
            return
    else:
        logger.warning("Shutdown grace period already spent; terminating jobs")
    await asyncio.to_thread(
        orchestrator.shutdown, wait=True, terminate_running=True
    )


async def root_handler(request: web.Request) -> web.Response:
    """Handle GET / with the service banner."""
    return web.json_response({"message": "Movie Maker API Server"})


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns JSON health status with appropriate HTTP status code:
    - 200: healthy
    - 503: shutting down
    """
    from moviemaker.jobs.models import JobStatus

    lifecycle: DaemonLifecycle | None = request.app.get("lifecycle")
    orchestrator: EditOrchestrator = request.app["orchestrator"]

    shutting_down = lifecycle.is_shutting_down if lifecycle else False
    uptime = lifecycle.uptime_seconds if lifecycle else 0.0
    jobs = orchestrator.active_jobs()

    health = HealthStatus(
        status="unhealthy" if shutting_down else "healthy",
        uptime_seconds=round(uptime, 1),
        version=__version__,
        shutting_down=shutting_down,
        jobs_queued=sum(1 for j in jobs if j.status is JobStatus.QUEUED),
        jobs_running=sum(1 for j in jobs if j.status is JobStatus.RUNNING),
        max_workers=orchestrator.executor.max_workers,
    )
    return web.json_response(
        health.to_dict(), status=503 if shutting_down else 200
    )
