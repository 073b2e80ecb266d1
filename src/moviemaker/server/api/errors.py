"""Standardized API error response helper.

Provides a consistent error response format with machine-readable error codes
for all API endpoints. All error responses include:
- ``error``: Human-readable error message
- ``code``: Machine-readable error code string
- ``details`` (optional): Additional context for the error

Usage:
    from moviemaker.server.api.errors import api_error, INVALID_REQUEST

    return api_error("No file uploaded", code=INVALID_REQUEST)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from moviemaker.exceptions import (
    EngineError,
    InvalidNameError,
    MovieMakerError,
    NotFoundError,
    RequestValidationError,
    ResourceExhaustedError,
)

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
INVALID_JSON = "INVALID_JSON"
NOT_FOUND = "NOT_FOUND"
INVALID_NAME = "INVALID_NAME"
VALIDATION_FAILED = "VALIDATION_FAILED"
UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
ENGINE_ERROR = "ENGINE_ERROR"
RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
JOB_CANCELLED = "JOB_CANCELLED"
INTERNAL_ERROR = "INTERNAL_ERROR"
SHUTTING_DOWN = "SHUTTING_DOWN"


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (use constants from this module).
        status: HTTP status code (default 400).
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def error_response(exc: MovieMakerError) -> web.Response:
    """Map a domain exception to its error response."""
    if isinstance(exc, NotFoundError):
        return api_error(str(exc), code=NOT_FOUND, status=404)
    if isinstance(exc, InvalidNameError):
        return api_error(str(exc), code=INVALID_NAME, status=400)
    if isinstance(exc, RequestValidationError):
        return api_error(str(exc), code=VALIDATION_FAILED, status=400)
    if isinstance(exc, ResourceExhaustedError):
        return api_error(str(exc), code=RESOURCE_EXHAUSTED, status=503)
    if isinstance(exc, EngineError):
        details: dict[str, Any] = {"stderr": exc.stderr_tail}
        if exc.returncode is not None:
            details["returncode"] = exc.returncode
        return api_error(str(exc), code=ENGINE_ERROR, status=500, details=details)
    return api_error(str(exc), code=INTERNAL_ERROR, status=500)
