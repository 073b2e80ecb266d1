"""Supervised ffmpeg process execution.

FFmpegRunner spawns one ffmpeg process, reads its error stream on a helper
thread, and enforces a timeout and a cancellation event while waiting.
Only the tail of the error stream is retained, for diagnostics.
"""

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path

from moviemaker.core.subprocess_utils import tail_text
from moviemaker.exceptions import EngineError
from moviemaker.executor.interface import require_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Outcome of one supervised ffmpeg run."""

    returncode: int
    stderr_tail: str
    timed_out: bool = False
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not (self.timed_out or self.cancelled)


class FFmpegRunner:
    """Run ffmpeg commands with timeout, cancellation and stderr capture."""

    DEFAULT_TIMEOUT: int = 1800  # 30 minutes
    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after exit
    TERMINATE_GRACE: float = 5.0  # Seconds between SIGTERM and SIGKILL
    POLL_INTERVAL: float = 0.25

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        timeout: int | None = None,
        stderr_tail_bytes: int = 4096,
    ) -> None:
        """Initialize the runner.

        Args:
            ffmpeg_path: Explicit ffmpeg path. None searches PATH on first use.
            timeout: Per-run timeout in seconds. None uses DEFAULT_TIMEOUT,
                0 disables the timeout.
            stderr_tail_bytes: How much of the error stream to keep.
        """
        self._configured_path = ffmpeg_path
        self._tool_path: Path | None = None
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._stderr_tail_bytes = stderr_tail_bytes

    @property
    def tool_path(self) -> Path:
        """Path to ffmpeg, verifying availability.

        Raises:
            EngineError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool("ffmpeg", self._configured_path)
        return self._tool_path

    @property
    def timeout(self) -> int:
        return self._timeout

    def _stop_process(self, process: subprocess.Popen, graceful: bool) -> None:
        if graceful:
            process.terminate()
            try:
                process.wait(timeout=self.TERMINATE_GRACE)
                return
            except subprocess.TimeoutExpired:
                logger.warning("ffmpeg ignored SIGTERM; killing pid %d", process.pid)
        process.kill()
        process.wait()

    def run(
        self,
        cmd: list[str],
        description: str,
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        """Run an ffmpeg command to completion, timeout or cancellation.

        Args:
            cmd: Full argument vector, executable first.
            description: Description for logging.
            cancel_event: When set, the process is terminated.

        Returns:
            RunResult. returncode is -1 when the run timed out or was
            cancelled.

        Raises:
            EngineError: If the process could not be started.
        """
        logger.debug("Running %s: %s", description, " ".join(cmd))
        try:
            process = subprocess.Popen(  # nosec B603 - args built from a plan
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise EngineError(f"Could not start ffmpeg: {e}") from e

        # Bounded; only the tail is ever reported
        stderr_lines: deque[str] = deque(maxlen=256)
        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            """Read stderr lines and put them in the queue."""
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)  # Signal end of output

        reader_thread = threading.Thread(
            target=read_stderr, name="ffmpeg-stderr", daemon=True
        )
        reader_thread.start()

        timed_out = False
        cancelled = False
        stderr_eof = False
        start_time = time.monotonic()

        while True:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            if self._timeout and time.monotonic() - start_time >= self._timeout:
                timed_out = True
                break
            if process.poll() is not None:
                break
            try:
                line = stderr_queue.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                continue
            if line is None:
                # Stream closed; keep polling until the process exits
                stderr_eof = True
                continue
            stderr_lines.append(line)

        if timed_out or cancelled:
            if timed_out:
                logger.warning(
                    "%s timed out after %s seconds", description, self._timeout
                )
            else:
                logger.info("%s cancelled; terminating ffmpeg", description)
            stop_event.set()
            self._stop_process(process, graceful=cancelled)
            if process.stderr:
                try:
                    process.stderr.close()
                except OSError:  # nosec B110 - close errors are irrelevant here
                    pass
            reader_thread.join(timeout=2.0)
            if reader_thread.is_alive():
                logger.error(
                    "Stderr reader thread failed to terminate; abandoning it"
                )
            self._drain(stderr_queue, stderr_lines, deadline=0.0)
            return RunResult(
                returncode=-1,
                stderr_tail=tail_text("".join(stderr_lines), self._stderr_tail_bytes),
                timed_out=timed_out,
                cancelled=cancelled,
            )

        if not stderr_eof:
            self._drain(
                stderr_queue, stderr_lines, deadline=self.STDERR_DRAIN_TIMEOUT
            )
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)

        returncode = process.returncode
        elapsed = time.monotonic() - start_time
        if returncode == 0:
            logger.debug("%s finished in %.1fs", description, elapsed)
        else:
            logger.warning(
                "%s failed with exit code %d after %.1fs",
                description,
                returncode,
                elapsed,
            )
        return RunResult(
            returncode=returncode,
            stderr_tail=tail_text("".join(stderr_lines), self._stderr_tail_bytes),
        )

    @staticmethod
    def _drain(
        stderr_queue: "queue.Queue[str | None]",
        stderr_lines: deque,
        deadline: float,
    ) -> None:
        """Move queued stderr lines into stderr_lines until end-of-stream."""
        end = time.monotonic() + deadline
        while True:
            remaining = end - time.monotonic()
            try:
                if remaining > 0:
                    line = stderr_queue.get(timeout=remaining)
                else:
                    line = stderr_queue.get_nowait()
            except queue.Empty:
                return
            if line is None:
                return
            stderr_lines.append(line)
