"""Helpers for short-lived external tool calls.

ffprobe and similar quick invocations go through run_command() so that
timeouts, decoding and debug logging are uniform. Long-running ffmpeg
jobs are supervised by moviemaker.executor.ffmpeg_base instead.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    args: list[str | Path], timeout: float = 120
) -> tuple[str, str, int]:
    """Run a tool to completion and capture its output as text.

    Undecodable bytes are replaced rather than raising.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If the tool runs past timeout. The child
            has already been killed when this is raised.
        OSError: If the executable cannot be started.
    """
    argv = [str(arg) for arg in args]
    tool = Path(argv[0]).name
    logger.debug("Running %s", " ".join(argv))

    started = time.monotonic()
    try:
        result = subprocess.run(  # nosec B603 - argv list, no shell
            argv,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s timed out after %ss", tool, timeout)
        raise

    logger.debug(
        "%s exited %d in %.2fs", tool, result.returncode, time.monotonic() - started
    )
    return result.stdout or "", result.stderr or "", result.returncode


def tail_text(text: str, max_bytes: int) -> str:
    """Return at most the last max_bytes of text as UTF-8, whole chars only."""
    if max_bytes <= 0:
        return ""
    encoded = text.encode("utf-8", errors="replace")
    if len(encoded) <= max_bytes:
        return text
    return encoded[-max_bytes:].decode("utf-8", errors="ignore")
