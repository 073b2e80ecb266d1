"""API handlers for edit operations.

Endpoints:
    POST /api/video/trim - {filename, startTime, endTime}
    POST /api/video/concat - {filenames}
    POST /api/video/convert - {filename, format, quality?}
    POST /api/video/filter - {filename, brightness?, contrast?, saturation?}

Each handler submits the job and waits for it without blocking the event
loop, then responds ``{message, outputFile, outputPath}``.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from moviemaker.editing.orchestrator import EditOrchestrator
from moviemaker.exceptions import RequestValidationError
from moviemaker.jobs.models import JobStatus
from moviemaker.server.api.errors import (
    INVALID_JSON,
    JOB_CANCELLED,
    VALIDATION_FAILED,
    api_error,
)
from moviemaker.server.api.middleware import shutdown_check_middleware
from moviemaker.server.api.schemas import (
    ConcatBody,
    ConvertBody,
    EditBody,
    FilterBody,
    TrimBody,
    parse_body,
)

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGES = {
    TrimBody: "Video trimmed successfully",
    ConcatBody: "Videos concatenated successfully",
    ConvertBody: "Video converted successfully",
    FilterBody: "Video filter applied successfully",
}


async def _run_edit(request: web.Request, body_model: type[EditBody]) -> web.Response:
    orchestrator: EditOrchestrator = request.app["orchestrator"]

    try:
        data = await request.json()
    except ValueError:
        # JSONDecodeError, or UnicodeDecodeError for a non-UTF-8 body
        return api_error("Invalid JSON payload", code=INVALID_JSON)

    try:
        body = parse_body(body_model, data)
    except RequestValidationError as e:
        return api_error(
            str(e), code=VALIDATION_FAILED, details=getattr(e, "errors", None)
        )

    handle = await asyncio.to_thread(orchestrator.submit, body.to_request())
    try:
        artifact = await asyncio.wrap_future(handle.future)
    except asyncio.CancelledError:
        if handle.status is JobStatus.CANCELLED:
            # Discarded from the backlog (e.g. server shutdown)
            return api_error(
                "Job was cancelled before it started",
                code=JOB_CANCELLED,
                status=503,
            )
        # The request itself was cancelled; stop the job too
        handle.cancel()
        raise

    return web.json_response(
        {
            "message": _SUCCESS_MESSAGES[body_model],
            "outputFile": artifact.filename,
            "outputPath": f"/output/{artifact.filename}",
        }
    )


@shutdown_check_middleware
async def trim_handler(request: web.Request) -> web.Response:
    """Handle POST /api/video/trim."""
    return await _run_edit(request, TrimBody)


@shutdown_check_middleware
async def concat_handler(request: web.Request) -> web.Response:
    """Handle POST /api/video/concat."""
    return await _run_edit(request, ConcatBody)


@shutdown_check_middleware
async def convert_handler(request: web.Request) -> web.Response:
    """Handle POST /api/video/convert."""
    return await _run_edit(request, ConvertBody)


@shutdown_check_middleware
async def filter_handler(request: web.Request) -> web.Response:
    """Handle POST /api/video/filter."""
    return await _run_edit(request, FilterBody)


def get_edit_routes() -> list[tuple[str, str, object]]:
    """Return (method, path, handler) tuples for edit routes."""
    return [
        ("POST", "/api/video/trim", trim_handler),
        ("POST", "/api/video/concat", concat_handler),
        ("POST", "/api/video/convert", convert_handler),
        ("POST", "/api/video/filter", filter_handler),
    ]
