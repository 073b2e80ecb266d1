"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (MOVIEMAKER_*)
3. Config file (~/.moviemaker/config.toml)
4. Default values

Environment variables:
- MOVIEMAKER_CONFIG_PATH: Path to config file (overrides default location)
- MOVIEMAKER_DATA_DIR: Base directory for uploads/output (default ~/.moviemaker)
- MOVIEMAKER_FFMPEG_PATH / MOVIEMAKER_FFPROBE_PATH: Tool locations
- MOVIEMAKER_UPLOAD_DIR / MOVIEMAKER_OUTPUT_DIR: Store directories
- MOVIEMAKER_MAX_UPLOAD_BYTES: Upload size limit
- MOVIEMAKER_MAX_WORKERS / MOVIEMAKER_MAX_BACKLOG: Job executor sizing
- MOVIEMAKER_JOB_TIMEOUT: Per-job timeout in seconds
- MOVIEMAKER_CHECK_TRIM_BOUNDS: Probe sources before trimming
- MOVIEMAKER_SERVER_BIND / MOVIEMAKER_SERVER_PORT: HTTP listener
- MOVIEMAKER_LOG_LEVEL / MOVIEMAKER_LOG_FORMAT / MOVIEMAKER_LOG_FILE: Logging
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from moviemaker.config.env import EnvReader
from moviemaker.config.models import (
    JobsConfig,
    LoggingConfig,
    MovieMakerConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
    UploadConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".moviemaker"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# path -> (parsed dict, mtime)
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class ConfigError(ValueError):
    """Raised when a configuration file cannot be parsed (strict mode)."""


def get_default_config_path() -> Path:
    """Get the config file path, honouring MOVIEMAKER_CONFIG_PATH."""
    env_path = os.environ.get("MOVIEMAKER_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def get_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the Movie Maker data directory.

    Can be overridden by MOVIEMAKER_DATA_DIR. Supports tilde expansion.

    Returns:
        Path to the data directory (~/.moviemaker/ by default).
    """
    reader = EnvReader(env)
    return reader.get_path("MOVIEMAKER_DATA_DIR") or DEFAULT_CONFIG_DIR


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from a TOML file.

    Results are cached with mtime-based invalidation.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigError on parse failures.
                If False (default), log a warning and return an empty dict.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        try:
            result = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            if strict:
                raise ConfigError(f"Failed to load config file {path}: {e}") from e
            logger.warning("Failed to load config file %s: %s", path, e)
            return {}

        logger.debug("Loaded config from %s", path)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def _file_path(section: dict, key: str) -> Path | None:
    value = section.get(key)
    return Path(value).expanduser() if value else None


def get_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    *,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    upload_dir: Path | None = None,
    output_dir: Path | None = None,
    max_workers: int | None = None,
) -> MovieMakerConfig:
    """Build the configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides MOVIEMAKER_CONFIG_PATH).
        env: Environment mapping (defaults to os.environ).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        upload_dir: CLI override for the upload directory.
        output_dir: CLI override for the output directory.
        max_workers: CLI override for the worker pool size.

    Returns:
        MovieMakerConfig with merged configuration.

    Raises:
        ValueError: If a merged value fails validation.
    """
    reader = EnvReader(env)
    file_config = load_config_file(
        config_path
        or reader.get_path("MOVIEMAKER_CONFIG_PATH")
        or DEFAULT_CONFIG_FILE
    )

    tools_file = file_config.get("tools", {})
    tools = ToolPathsConfig(
        ffmpeg=_first(
            ffmpeg_path,
            reader.get_path("MOVIEMAKER_FFMPEG_PATH", must_exist=True),
            _file_path(tools_file, "ffmpeg"),
        ),
        ffprobe=_first(
            ffprobe_path,
            reader.get_path("MOVIEMAKER_FFPROBE_PATH", must_exist=True),
            _file_path(tools_file, "ffprobe"),
        ),
    )

    storage_file = file_config.get("storage", {})
    storage = StorageConfig(
        upload_dir=_first(
            upload_dir,
            reader.get_path("MOVIEMAKER_UPLOAD_DIR"),
            _file_path(storage_file, "upload_dir"),
        ),
        output_dir=_first(
            output_dir,
            reader.get_path("MOVIEMAKER_OUTPUT_DIR"),
            _file_path(storage_file, "output_dir"),
        ),
    )

    upload_file = file_config.get("upload", {})
    upload_defaults = UploadConfig()
    upload = UploadConfig(
        max_bytes=_first(
            reader.get_int("MOVIEMAKER_MAX_UPLOAD_BYTES"),
            upload_file.get("max_bytes"),
            upload_defaults.max_bytes,
        ),
        allowed_extensions=tuple(
            upload_file.get("allowed_extensions", upload_defaults.allowed_extensions)
        ),
    )

    jobs_file = file_config.get("jobs", {})
    jobs_defaults = JobsConfig()
    jobs = JobsConfig(
        max_workers=_first(
            max_workers,
            reader.get_int("MOVIEMAKER_MAX_WORKERS"),
            jobs_file.get("max_workers"),
            jobs_defaults.max_workers,
        ),
        max_backlog=_first(
            reader.get_int("MOVIEMAKER_MAX_BACKLOG"),
            jobs_file.get("max_backlog"),
            jobs_defaults.max_backlog,
        ),
        timeout_seconds=_first(
            reader.get_int("MOVIEMAKER_JOB_TIMEOUT"),
            jobs_file.get("timeout_seconds"),
            jobs_defaults.timeout_seconds,
        ),
        stderr_tail_bytes=_first(
            jobs_file.get("stderr_tail_bytes"),
            jobs_defaults.stderr_tail_bytes,
        ),
        check_trim_bounds=_first(
            reader.get_bool("MOVIEMAKER_CHECK_TRIM_BOUNDS"),
            jobs_file.get("check_trim_bounds"),
            jobs_defaults.check_trim_bounds,
        ),
    )

    logging_file = file_config.get("logging", {})
    logging_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        level=_first(
            reader.get_str("MOVIEMAKER_LOG_LEVEL"),
            logging_file.get("level"),
            logging_defaults.level,
        ),
        file=_first(
            reader.get_path("MOVIEMAKER_LOG_FILE"),
            _file_path(logging_file, "file"),
        ),
        format=_first(
            reader.get_str("MOVIEMAKER_LOG_FORMAT"),
            logging_file.get("format"),
            logging_defaults.format,
        ),
        include_stderr=_first(
            logging_file.get("include_stderr"), logging_defaults.include_stderr
        ),
        max_bytes=_first(logging_file.get("max_bytes"), logging_defaults.max_bytes),
        backup_count=_first(
            logging_file.get("backup_count"), logging_defaults.backup_count
        ),
    )

    server_file = file_config.get("server", {})
    server_defaults = ServerConfig()
    server = ServerConfig(
        bind=_first(
            reader.get_str("MOVIEMAKER_SERVER_BIND"),
            server_file.get("bind"),
            server_defaults.bind,
        ),
        port=_first(
            reader.get_int("MOVIEMAKER_SERVER_PORT"),
            server_file.get("port"),
            server_defaults.port,
        ),
        shutdown_timeout=_first(
            reader.get_float("MOVIEMAKER_SERVER_SHUTDOWN_TIMEOUT"),
            server_file.get("shutdown_timeout"),
            server_defaults.shutdown_timeout,
        ),
    )

    return MovieMakerConfig(
        tools=tools,
        storage=storage,
        upload=upload,
        jobs=jobs,
        logging=logging_config,
        server=server,
        data_dir=get_data_dir(env),
    )
