"""External tool resolution.

Tools are resolved from an explicit path (configuration, environment or
CLI flag) first, then from the system PATH.
"""

import logging
import shutil
from pathlib import Path

from moviemaker.exceptions import EngineError

logger = logging.getLogger(__name__)

_INSTALL_HINT = (
    "Install ffmpeg, or configure a custom path via MOVIEMAKER_{upper}_PATH "
    "or ~/.moviemaker/config.toml"
)


def get_tool_path(tool_name: str, configured: Path | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: Executable name ("ffmpeg" or "ffprobe").
        configured: Explicitly configured path, if any.

    Returns:
        Path to the executable or None.
    """
    if configured is not None:
        configured = Path(configured)
        if configured.is_file():
            return configured
        logger.warning("Configured %s path does not exist: %s", tool_name, configured)
        return None
    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Raises:
        EngineError: If the tool cannot be found.
    """
    path = get_tool_path(tool_name, configured)
    if path is None:
        hint = _INSTALL_HINT.format(upper=tool_name.upper())
        raise EngineError(f"Required tool not available: {tool_name}. {hint}")
    return path
