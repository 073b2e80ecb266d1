"""Configuration data models.

This module defines dataclasses for Movie Maker configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (
    "jpeg",
    "jpg",
    "png",
    "gif",
    "mp4",
    "avi",
    "mov",
    "wmv",
)


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class StorageConfig:
    """Directories backing the asset and output stores.

    None means "use the default location under the data directory".
    """

    upload_dir: Path | None = None
    output_dir: Path | None = None


@dataclass
class UploadConfig:
    """Limits applied to uploaded files."""

    # 100 MB
    max_bytes: int = 100 * 1024 * 1024

    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        self.allowed_extensions = tuple(
            ext.lower().lstrip(".") for ext in self.allowed_extensions
        )


@dataclass
class JobsConfig:
    """Configuration for the transcode job executor."""

    max_workers: int = 2
    """Hard cap on concurrently running ffmpeg processes."""

    max_backlog: int = 16
    """Maximum number of jobs waiting for a worker."""

    timeout_seconds: int = 1800
    """Per-job timeout in seconds (0 disables the timeout)."""

    stderr_tail_bytes: int = 4096
    """How much of ffmpeg's stderr is kept for error reports."""

    check_trim_bounds: bool = True
    """Probe the source before a trim to reject end times past its duration."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.max_backlog < 1:
            raise ValueError(f"max_backlog must be at least 1, got {self.max_backlog}")
        if self.timeout_seconds < 0:
            raise ValueError(
                f"timeout_seconds must be non-negative, got {self.timeout_seconds}"
            )
        if self.stderr_tail_bytes < 0:
            raise ValueError(
                f"stderr_tail_bytes must be non-negative, got {self.stderr_tail_bytes}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class ServerConfig:
    """Configuration for the HTTP server (`moviemaker serve`)."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 5000
    """Port number for HTTP server."""

    shutdown_timeout: float = 30.0
    """Seconds to wait for graceful shutdown before cancelling tasks."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )


@dataclass
class MovieMakerConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Base directory for uploads/output when not configured explicitly
    data_dir: Path = field(default_factory=lambda: Path.home() / ".moviemaker")

    @property
    def upload_dir(self) -> Path:
        """Directory holding uploaded source assets."""
        return self.storage.upload_dir or self.data_dir / "uploads"

    @property
    def output_dir(self) -> Path:
        """Directory holding derived output artifacts."""
        return self.storage.output_dir or self.data_dir / "output"
