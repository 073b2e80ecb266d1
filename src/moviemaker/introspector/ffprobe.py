"""FFprobe-based implementation of the MediaProbe protocol."""

import json
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from moviemaker.core.subprocess_utils import run_command, tail_text
from moviemaker.exceptions import EngineError, NotFoundError
from moviemaker.executor.interface import require_tool
from moviemaker.introspector.parsers import parse_ffprobe_output
from moviemaker.introspector.types import ProbeResult

logger = logging.getLogger(__name__)


class FFprobeProbe:
    """ffprobe-based implementation of MediaProbe.

    The executable is resolved lazily on first use, so constructing a probe
    never fails on a host without ffmpeg installed.
    """

    DEFAULT_TIMEOUT: int = 60
    STDERR_TAIL_BYTES: int = 4096

    def __init__(
        self,
        ffprobe_path: Path | None = None,
        timeout: int | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            ffprobe_path: Explicit path to ffprobe. None searches PATH.
            timeout: Seconds before a probe is abandoned.
        """
        self._configured_path = ffprobe_path
        self._tool_path: Path | None = None
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

    @property
    def tool_path(self) -> Path:
        """Path to ffprobe, verifying availability."""
        if self._tool_path is None:
            self._tool_path = require_tool("ffprobe", self._configured_path)
        return self._tool_path

    def probe(self, path: Path) -> ProbeResult:
        """Extract metadata from a media file.

        Raises:
            NotFoundError: If the file does not exist.
            EngineError: If ffprobe fails, times out, or emits bad JSON.
        """
        if not path.is_file():
            raise NotFoundError("asset", path.name)

        data = self._run_ffprobe(path)
        result = parse_ffprobe_output(path, data)
        logger.debug(
            "Probed %s: format=%s duration=%s video=%s audio=%s",
            path.name,
            result.format_name,
            result.duration,
            result.video is not None,
            result.audio is not None,
        )
        return result

    def _run_ffprobe(self, path: Path) -> object:
        args: list[str | Path] = [
            self.tool_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            "-show_format",
            path,
        ]
        try:
            stdout, stderr, returncode = run_command(args, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            raise EngineError(
                f"ffprobe timed out for {path.name} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise EngineError(f"Could not start ffprobe: {e}") from e

        if returncode != 0:
            raise EngineError(
                f"ffprobe failed for {path.name} (exit code {returncode})",
                stderr_tail=tail_text(stderr, self.STDERR_TAIL_BYTES),
                returncode=returncode,
            )

        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise EngineError(
                f"Invalid ffprobe output for {path.name}: {e}",
                stderr_tail=tail_text(stderr, self.STDERR_TAIL_BYTES),
                returncode=returncode,
            ) from e
