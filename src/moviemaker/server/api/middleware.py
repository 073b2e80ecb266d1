"""Request middleware for the HTTP API.

- error_middleware: renders domain exceptions as ``{error, code, details?}``
- shutdown_check_middleware: per-handler decorator rejecting new work
  while the server is shutting down
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps

from aiohttp import web

from moviemaker.exceptions import MovieMakerError
from moviemaker.server.api.errors import (
    INTERNAL_ERROR,
    SHUTTING_DOWN,
    api_error,
    error_response,
)

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Convert exceptions escaping API handlers into JSON error bodies."""
    try:
        return await handler(request)
    except web.HTTPException as e:
        if not request.path.startswith("/api/") or e.status < 400:
            raise
        return api_error(e.reason, code=f"HTTP_{e.status}", status=e.status)
    except MovieMakerError as e:
        logger.info("%s %s failed: %s", request.method, request.path, e)
        return error_response(e)
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return api_error("Internal server error", code=INTERNAL_ERROR, status=500)


def shutdown_check_middleware(handler: Handler) -> Handler:
    """Decorator middleware that returns 503 if server is shutting down.

    Usage:
        @shutdown_check_middleware
        async def my_api_handler(request: web.Request) -> web.Response:
            ...
    """

    @wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        lifecycle = request.app.get("lifecycle")
        if lifecycle and lifecycle.is_shutting_down:
            return api_error(
                "Service is shutting down", code=SHUTTING_DOWN, status=503
            )
        return await handler(request)

    return wrapper
