"""API route modules for the Movie Maker server.

- files.py: Upload, listing, deletion and probing of source files
- edits.py: Trim, concat, convert and filter endpoints
- outputs.py: Listing and deletion of produced artifacts, active jobs
"""

from aiohttp import web

from moviemaker.server.api.edits import get_edit_routes
from moviemaker.server.api.files import get_file_routes
from moviemaker.server.api.outputs import get_output_routes

__all__ = [
    "setup_api_routes",
]

_ROUTE_GETTERS = [
    get_file_routes,
    get_edit_routes,
    get_output_routes,
]


def setup_api_routes(app: web.Application) -> None:
    """Register all API routes with the application."""
    for get_routes in _ROUTE_GETTERS:
        for method, path, handler in get_routes():
            app.router.add_route(method, path, handler)
