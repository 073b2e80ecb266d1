"""Unit tests for server/lifecycle.py, server/app.py and server/signals.py."""

import asyncio
import signal
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock, call

from moviemaker.config.models import (
    MovieMakerConfig,
    ServerConfig,
    StorageConfig,
    UploadConfig,
)
from moviemaker.core.datetime_utils import utc_now
from moviemaker.server import DaemonLifecycle, HealthStatus, ShutdownState, create_app
from moviemaker.server.app import MULTIPART_OVERHEAD, _stop_executor
from moviemaker.server.signals import remove_signal_handlers, setup_signal_handlers


class TestShutdownState:
    """Tests for ShutdownState."""

    def test_idle_state_has_no_deadline(self) -> None:
        state = ShutdownState()
        assert not state.is_shutting_down
        assert state.seconds_remaining() is None

    def test_remaining_never_negative(self) -> None:
        state = ShutdownState(
            initiated=utc_now() - timedelta(seconds=10),
            deadline=utc_now() - timedelta(seconds=1),
        )
        assert state.is_shutting_down
        assert state.seconds_remaining() == 0.0


class TestDaemonLifecycle:
    """Tests for DaemonLifecycle."""

    def test_initiate_shutdown_sets_deadline(self) -> None:
        lifecycle = DaemonLifecycle(shutdown_timeout=20)

        lifecycle.initiate_shutdown()

        state = lifecycle.shutdown_state
        assert lifecycle.is_shutting_down
        assert state.deadline - state.initiated == timedelta(seconds=20)

    def test_initiate_shutdown_is_idempotent(self) -> None:
        lifecycle = DaemonLifecycle()
        lifecycle.initiate_shutdown()
        first = lifecycle.shutdown_state.deadline

        lifecycle.initiate_shutdown()

        assert lifecycle.shutdown_state.deadline == first

    def test_grace_period_before_shutdown(self) -> None:
        assert DaemonLifecycle(shutdown_timeout=12).grace_period() == 12

    def test_grace_period_counts_down(self) -> None:
        lifecycle = DaemonLifecycle(shutdown_timeout=30)
        lifecycle.initiate_shutdown()
        lifecycle.shutdown_state.deadline = utc_now() + timedelta(seconds=5)

        assert 0 < lifecycle.grace_period() <= 5

    def test_uptime(self) -> None:
        lifecycle = DaemonLifecycle(start_time=utc_now() - timedelta(seconds=5))
        assert lifecycle.uptime_seconds >= 5


class TestStopExecutor:
    """Tests for the executor cleanup hook."""

    def _app(self, lifecycle: DaemonLifecycle | None, orchestrator) -> dict:
        config = MovieMakerConfig(server=ServerConfig(shutdown_timeout=30))
        return {"orchestrator": orchestrator, "config": config, "lifecycle": lifecycle}

    def test_waits_for_running_jobs(self) -> None:
        orchestrator = MagicMock()

        asyncio.run(_stop_executor(self._app(DaemonLifecycle(), orchestrator)))

        assert orchestrator.shutdown.call_args_list == [
            call(wait=False),
            call(wait=True),
        ]

    def test_without_lifecycle_uses_configured_timeout(self) -> None:
        orchestrator = MagicMock()

        asyncio.run(_stop_executor(self._app(None, orchestrator)))

        assert orchestrator.shutdown.call_args_list[-1] == call(wait=True)

    def test_spent_deadline_terminates_immediately(self) -> None:
        orchestrator = MagicMock()
        lifecycle = DaemonLifecycle(shutdown_timeout=30)
        lifecycle.initiate_shutdown()
        lifecycle.shutdown_state.deadline = utc_now() - timedelta(seconds=1)

        asyncio.run(_stop_executor(self._app(lifecycle, orchestrator)))

        assert orchestrator.shutdown.call_args_list == [
            call(wait=False),
            call(wait=True, terminate_running=True),
        ]

    def test_terminates_when_jobs_outlast_deadline(self) -> None:
        def slow_shutdown(wait=True, cancel_pending=True, terminate_running=False):
            if wait and not terminate_running:
                time.sleep(0.5)

        orchestrator = MagicMock()
        orchestrator.shutdown.side_effect = slow_shutdown
        lifecycle = DaemonLifecycle(shutdown_timeout=0.05)
        lifecycle.initiate_shutdown()

        asyncio.run(_stop_executor(self._app(lifecycle, orchestrator)))

        assert orchestrator.shutdown.call_args_list[-1] == call(
            wait=True, terminate_running=True
        )


class TestHealthStatus:
    def test_to_dict(self) -> None:
        health = HealthStatus(status="healthy", uptime_seconds=1.5, version="0.1.0")

        assert health.to_dict() == {
            "status": "healthy",
            "uptime_seconds": 1.5,
            "version": "0.1.0",
            "shutting_down": False,
            "jobs_queued": 0,
            "jobs_running": 0,
            "max_workers": 0,
        }


class TestCreateApp:
    """Tests for create_app()."""

    def test_builds_orchestrator_from_config(self, temp_dir: Path) -> None:
        config = MovieMakerConfig(
            storage=StorageConfig(
                upload_dir=temp_dir / "in", output_dir=temp_dir / "out"
            ),
            upload=UploadConfig(max_bytes=2048),
        )

        app = create_app(config=config)

        orchestrator = app["orchestrator"]
        assert app["config"] is config
        assert app["upload_config"] is config.upload
        assert app["lifecycle"] is None
        assert orchestrator.assets.root == temp_dir / "in"
        assert orchestrator.outputs.root == temp_dir / "out"
        assert app._client_max_size == 2048 + MULTIPART_OVERHEAD

    def test_registers_routes(self, temp_dir: Path) -> None:
        config = MovieMakerConfig(
            storage=StorageConfig(
                upload_dir=temp_dir / "in", output_dir=temp_dir / "out"
            )
        )

        app = create_app(config=config)

        routes = {
            (route.method, route.resource.canonical)
            for route in app.router.routes()
            if route.resource is not None
        }
        assert ("POST", "/api/upload") in routes
        assert ("GET", "/api/files") in routes
        assert ("DELETE", "/api/files/{name}") in routes
        assert ("GET", "/api/video/info/{name}") in routes
        assert ("POST", "/api/video/trim") in routes
        assert ("POST", "/api/video/concat") in routes
        assert ("POST", "/api/video/convert") in routes
        assert ("POST", "/api/video/filter") in routes
        assert ("GET", "/api/output") in routes
        assert ("DELETE", "/api/output/{name}") in routes
        assert ("GET", "/api/jobs") in routes
        assert ("GET", "/health") in routes
        assert "uploads" in app.router.named_resources()
        assert "output" in app.router.named_resources()


class TestSignalHandlers:
    """Tests for setup_signal_handlers() and remove_signal_handlers()."""

    def test_signal_initiates_shutdown(self) -> None:
        loop = MagicMock()
        lifecycle = DaemonLifecycle()
        event = asyncio.Event()

        setup_signal_handlers(loop, lifecycle, event)

        registered = {c.args[0]: c.args for c in loop.add_signal_handler.call_args_list}
        assert set(registered) == {signal.SIGTERM, signal.SIGINT}
        _, callback, sig = registered[signal.SIGTERM]
        callback(sig)
        assert lifecycle.is_shutting_down
        assert event.is_set()

    def test_registration_failure_is_logged(self) -> None:
        loop = MagicMock()
        loop.add_signal_handler.side_effect = NotImplementedError

        setup_signal_handlers(loop, DaemonLifecycle(), asyncio.Event())
        remove_signal_handlers(loop)

        assert loop.remove_signal_handler.call_count == 2
