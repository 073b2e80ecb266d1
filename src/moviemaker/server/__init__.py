"""Movie Maker HTTP server module.

This module serves the JSON API over aiohttp. It includes the application
factory, signal handling for graceful shutdown, and lifecycle management.

Exports:
    DaemonLifecycle: Uptime and the shutdown grace clock
    ShutdownState: When shutdown began and its deadline
    HealthStatus: Response payload for health check endpoint
    create_app: Factory function to create the aiohttp Application
"""

from moviemaker.server.app import HealthStatus, create_app
from moviemaker.server.lifecycle import DaemonLifecycle, ShutdownState

__all__ = [
    "DaemonLifecycle",
    "ShutdownState",
    "HealthStatus",
    "create_app",
]
