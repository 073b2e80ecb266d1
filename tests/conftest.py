"""Shared test fixtures for Movie Maker."""

import shutil
import tempfile
import threading
from pathlib import Path

import pytest

from moviemaker.executor.ffmpeg_base import RunResult
from moviemaker.introspector.types import ProbeResult


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


class FakeRunner:
    """Stand-in for FFmpegRunner that never spawns a process.

    By default it writes ``payload`` to the last argument of the command,
    which is where build_ffmpeg_args puts the output path, and exits 0.

    Attributes:
        returncode: Exit code to report.
        write_output: Whether to create the output file.
        gate: When set, run() blocks until the event is set or the job is
            cancelled, so tests can hold a worker busy.
        calls: Commands received, in order.
    """

    def __init__(
        self,
        returncode: int = 0,
        write_output: bool = True,
        payload: bytes = b"fake media",
        stderr_tail: str = "",
        gate: threading.Event | None = None,
    ) -> None:
        self.returncode = returncode
        self.write_output = write_output
        self.payload = payload
        self.stderr_tail = stderr_tail
        self.gate = gate
        self.calls: list[list[str]] = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    @property
    def tool_path(self) -> Path:
        return Path("/usr/bin/ffmpeg")

    @property
    def timeout(self) -> int:
        return 30

    def run(
        self,
        cmd: list[str],
        description: str,
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        with self._lock:
            self.calls.append(list(cmd))
        self.started.set()
        if self.gate is not None:
            while not self.gate.wait(0.01):
                if cancel_event is not None and cancel_event.is_set():
                    return RunResult(returncode=-1, stderr_tail="", cancelled=True)
        if cancel_event is not None and cancel_event.is_set():
            return RunResult(returncode=-1, stderr_tail="", cancelled=True)
        if self.write_output and self.returncode == 0:
            Path(cmd[-1]).write_bytes(self.payload)
        elif self.write_output:
            # Partial output left behind by a failing process
            Path(cmd[-1]).write_bytes(b"partial")
        return RunResult(returncode=self.returncode, stderr_tail=self.stderr_tail)


class FakeProbe:
    """Stand-in for FFprobeProbe returning a fixed duration."""

    def __init__(self, duration: float | None = 10.0) -> None:
        self.duration = duration
        self.calls: list[Path] = []

    def probe(self, path: Path) -> ProbeResult:
        self.calls.append(path)
        return ProbeResult(
            path=path,
            duration=self.duration,
            size=path.stat().st_size,
            bit_rate=None,
            format_name="mov,mp4,m4a,3gp,3g2,mj2",
        )


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner that succeeds and writes a small output file."""
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with custom behaviour."""
    return FakeRunner


@pytest.fixture
def make_probe():
    """Factory for FakeProbe instances with a custom duration."""
    return FakeProbe


@pytest.fixture
def fake_probe() -> FakeProbe:
    """Probe reporting a 10 second duration."""
    return FakeProbe()


@pytest.fixture
def upload_dir(temp_dir: Path) -> Path:
    path = temp_dir / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    path = temp_dir / "output"
    path.mkdir()
    return path
