"""CLI serve command.

This module provides the `moviemaker serve` command that runs the HTTP
API as a long-lived service.
"""

import asyncio
import logging
import os
import sys

import click

from moviemaker.cli import load_config
from moviemaker.cli.exit_codes import ExitCode
from moviemaker.config.models import MovieMakerConfig

logger = logging.getLogger(__name__)


async def run_server(config: MovieMakerConfig, bind: str, port: int) -> int:
    """Run the HTTP server until SIGTERM or SIGINT.

    Args:
        config: Effective configuration.
        bind: Address to bind to.
        port: Port to bind to.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from aiohttp import web

    from moviemaker.server.app import create_app
    from moviemaker.server.lifecycle import DaemonLifecycle
    from moviemaker.server.signals import (
        remove_signal_handlers,
        setup_signal_handlers,
    )

    lifecycle = DaemonLifecycle(shutdown_timeout=config.server.shutdown_timeout)
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    setup_signal_handlers(loop, lifecycle, shutdown_event)

    app = create_app(config=config)
    app["lifecycle"] = lifecycle

    # In-flight edit requests may be waiting on a job; give them the same
    # grace period as the executor before aiohttp cancels them.
    runner = web.AppRunner(app, shutdown_timeout=config.server.shutdown_timeout)
    await runner.setup()

    try:
        site = web.TCPSite(runner, bind, port)
        await site.start()

        logger.info(
            "Movie Maker server started on http://%s:%d (PID %d)",
            bind,
            port,
            os.getpid(),
        )
        logger.info("Uploads: %s", config.upload_dir)
        logger.info("Outputs: %s", config.output_dir)
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()

        logger.info(
            "Shutdown initiated, waiting up to %.1fs for running jobs",
            config.server.shutdown_timeout,
        )

    except OSError as e:
        if e.errno == 98:
            logger.error("Port %d is already in use", port)
            return ExitCode.GENERAL_ERROR
        if e.errno == 99:
            logger.error("Cannot bind to address %s", bind)
            return ExitCode.GENERAL_ERROR
        logger.error("Server error: %s", e)
        return ExitCode.GENERAL_ERROR
    finally:
        remove_signal_handlers(loop)
        await runner.cleanup()
        logger.info("Movie Maker server stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 5000).",
)
@click.pass_context
def serve_command(ctx: click.Context, bind: str | None, port: int | None) -> None:
    """Run the HTTP API server.

    Handles graceful shutdown on SIGTERM or SIGINT (Ctrl+C): new requests
    are refused, queued jobs are discarded, and running jobs get the
    configured shutdown timeout before they are terminated.

    \b
    Examples:
        moviemaker serve                    # Start with defaults
        moviemaker serve --port 8080        # Custom port
        moviemaker serve --bind 0.0.0.0     # Listen on all interfaces
    """
    config = load_config(ctx)

    # CLI > config file > env vars > defaults
    server_bind = bind if bind is not None else config.server.bind
    server_port = port if port is not None else config.server.port

    if not 1 <= server_port <= 65535:
        click.echo(f"Error: Port must be 1-65535, got {server_port}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    if server_port < 1024:
        logger.warning("Port %d is privileged and may require root", server_port)

    logger.info(
        "Starting Movie Maker server (bind=%s, port=%d, workers=%d)",
        server_bind,
        server_port,
        config.jobs.max_workers,
    )

    try:
        exit_code = asyncio.run(run_server(config, server_bind, server_port))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
