"""API handlers for job outputs.

Endpoints:
    GET /api/output - List produced artifacts
    DELETE /api/output/{name} - Delete an artifact
    GET /api/jobs - Queued and running jobs
"""

from __future__ import annotations

import asyncio

from aiohttp import web

from moviemaker.editing.orchestrator import EditOrchestrator


async def list_outputs_handler(request: web.Request) -> web.Response:
    """Handle GET /api/output."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    outputs = await asyncio.to_thread(orchestrator.list_outputs)
    return web.json_response([artifact.to_dict() for artifact in outputs])


async def delete_output_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/output/{name}."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    name = request.match_info["name"]
    await asyncio.to_thread(orchestrator.delete_output, name)
    return web.json_response({"message": "File deleted successfully"})


async def list_jobs_handler(request: web.Request) -> web.Response:
    """Handle GET /api/jobs."""
    orchestrator: EditOrchestrator = request.app["orchestrator"]
    return web.json_response([job.to_dict() for job in orchestrator.active_jobs()])


def get_output_routes() -> list[tuple[str, str, object]]:
    """Return (method, path, handler) tuples for output routes."""
    return [
        ("GET", "/api/output", list_outputs_handler),
        ("DELETE", "/api/output/{name}", delete_output_handler),
        ("GET", "/api/jobs", list_jobs_handler),
    ]
