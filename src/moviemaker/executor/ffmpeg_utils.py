"""FFmpeg executor utilities.

Temp file management and output validation for the write-then-move
pattern used by every job.
"""

import logging
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from moviemaker.executor.command import render_concat_list

logger = logging.getLogger(__name__)


def validate_output(output_path: Path) -> tuple[bool, str | None]:
    """Validate an FFmpeg output file.

    Checks that the output file exists and is non-empty.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    if not output_path.exists():
        return False, f"Output file does not exist: {output_path.name}"

    try:
        output_size = output_path.stat().st_size
    except OSError as e:
        return False, f"Could not stat output file: {e}"

    if output_size == 0:
        return False, f"Output file is empty: {output_path.name}"

    return True, None


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary file, logging any errors."""
    if path.exists():
        try:
            path.unlink()
            logger.debug("Cleaned up temp file: %s", path)
        except OSError as e:
            logger.warning("Could not clean up temp file %s: %s", path, e)


def write_concat_list(inputs: Sequence[Path]) -> Path:
    """Write a concat demuxer list into a private temp directory.

    The caller removes the directory with remove_concat_list().
    """
    list_dir = Path(tempfile.mkdtemp(prefix="moviemaker-concat-"))
    list_path = list_dir / "inputs.txt"
    list_path.write_text(render_concat_list(inputs), encoding="utf-8")
    return list_path


def remove_concat_list(list_path: Path) -> None:
    """Remove a list written by write_concat_list() and its directory."""
    shutil.rmtree(list_path.parent, ignore_errors=True)
