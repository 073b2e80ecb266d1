"""API handlers for uploaded files.

Endpoints:
    POST /api/upload - Upload a source file (multipart field "file")
    GET /api/files - List uploaded files
    DELETE /api/files/{name} - Delete an uploaded file
    GET /api/video/info/{name} - Probe an uploaded file
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from aiohttp import BodyPartReader, hdrs, web

from moviemaker.config.models import UploadConfig
from moviemaker.editing.orchestrator import EditOrchestrator
from moviemaker.introspector.formatters import probe_result_to_dict
from moviemaker.server.api.errors import (
    INVALID_REQUEST,
    PAYLOAD_TOO_LARGE,
    UNSUPPORTED_MEDIA_TYPE,
    api_error,
)
from moviemaker.server.api.middleware import shutdown_check_middleware

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "file"
CHUNK_SIZE = 64 * 1024

# Browsers report these types for allowed extensions without naming them
_EXTRA_MIME_TYPES = frozenset({"video/quicktime", "video/x-msvideo"})


def is_allowed_upload(
    filename: str, content_type: str | None, allowed: tuple[str, ...]
) -> bool:
    """Check the extension and the MIME type against the allowed set.

    The extension must be one of ``allowed``. The MIME type must mention
    one of them (``video/mp4``, ``image/jpeg``, ``video/x-ms-wmv``) or be
    a known alias for one.
    """
    ext = Path(filename).suffix.lower().lstrip(".")
    if ext not in allowed:
        return False
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime in _EXTRA_MIME_TYPES:
        return True
    pattern = "|".join(re.escape(a) for a in allowed)
    return bool(pattern) and re.search(pattern, mime) is not None


async def _find_file_part(request: web.Request) -> BodyPartReader | None:
    reader = await request.multipart()
    while True:
        part = await reader.next()
        if part is None:
            return None
        if isinstance(part, BodyPartReader) and part.name == UPLOAD_FIELD:
            return part
        await part.release()


@shutdown_check_middleware
async def upload_handler(request: web.Request) -> web.Response:
    """Handle POST /api/upload.

    Returns:
        ``{message, file: {filename, originalname, size, path}}``.
    """
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    upload_config: UploadConfig = request.app["upload_config"]

    if not request.content_type.startswith("multipart/"):
        return api_error("No file uploaded", code=INVALID_REQUEST)

    part = await _find_file_part(request)
    if part is None or not part.filename:
        return api_error("No file uploaded", code=INVALID_REQUEST)

    original_name = part.filename
    content_type = part.headers.get(hdrs.CONTENT_TYPE)
    if not is_allowed_upload(
        original_name, content_type, upload_config.allowed_extensions
    ):
        logger.info("Rejected upload %s (%s)", original_name, content_type)
        return api_error(
            "Images and videos only",
            code=UNSUPPORTED_MEDIA_TYPE,
            details={"allowed": list(upload_config.allowed_extensions)},
        )

    data = bytearray()
    while True:
        chunk = await part.read_chunk(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > upload_config.max_bytes:
            logger.info("Rejected upload %s: over size limit", original_name)
            return api_error(
                f"File exceeds the {upload_config.max_bytes} byte limit",
                code=PAYLOAD_TOO_LARGE,
                status=413,
            )

    asset = await asyncio.to_thread(
        orchestrator.register_upload, original_name, bytes(data)
    )
    return web.json_response(
        {
            "message": "File uploaded successfully",
            "file": {
                "filename": asset.filename,
                "originalname": asset.original_name,
                "size": asset.size,
                "path": f"/uploads/{asset.filename}",
            },
        }
    )


async def list_files_handler(request: web.Request) -> web.Response:
    """Handle GET /api/files."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    assets = await asyncio.to_thread(orchestrator.list_assets)
    return web.json_response([asset.to_dict() for asset in assets])


async def delete_file_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/files/{name}."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    name = request.match_info["name"]
    await asyncio.to_thread(orchestrator.delete_asset, name)
    return web.json_response({"message": "File deleted successfully"})


async def video_info_handler(request: web.Request) -> web.Response:
    """Handle GET /api/video/info/{name}."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    name = request.match_info["name"]
    result = await asyncio.to_thread(orchestrator.probe, name)
    return web.json_response(probe_result_to_dict(result))


def get_file_routes() -> list[tuple[str, str, object]]:
    """Return (method, path, handler) tuples for file routes."""
    return [
        ("POST", "/api/upload", upload_handler),
        ("GET", "/api/files", list_files_handler),
        ("DELETE", "/api/files/{name}", delete_file_handler),
        ("GET", "/api/video/info/{name}", video_info_handler),
    ]
