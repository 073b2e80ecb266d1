"""Apply command-line logging overrides on top of the configured defaults."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from moviemaker.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of base with every non-None override applied.

    Raises:
        ValueError: If an override fails LoggingConfig validation.
    """
    overrides = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    return replace(base, **{k: v for k, v in overrides.items() if v is not None})


def configure_logging_from_cli(
    *,
    config_path: Path | None = None,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> None:
    """Load config, apply CLI overrides and configure logging."""
    from moviemaker.config import get_config
    from moviemaker.logging import configure_logging

    config = get_config(config_path=config_path)
    configure_logging(
        build_logging_config(
            config.logging,
            level=level,
            file=file,
            format=format,
            include_stderr=include_stderr,
        )
    )
