"""CLI module for Movie Maker."""

import logging
import sys
from pathlib import Path

import click

from moviemaker.cli.exit_codes import ExitCode

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        config_path: Config file to read logging settings from.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from moviemaker.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


def load_config(ctx: click.Context):
    """Load configuration for a subcommand, exiting on invalid values."""
    from moviemaker.config import get_config

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        return get_config(config_path=config_path)
    except ValueError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)


@click.group()
@click.version_option(package_name="moviemaker")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.moviemaker/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Movie Maker - upload media and derive edited outputs with ffmpeg."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    try:
        _configure_logging(config_path, log_level, log_file, log_json)
    except ValueError as e:
        click.echo(f"Error: Invalid logging configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)


# Defer import to avoid circular dependency
def _register_commands():
    from moviemaker.cli.edit import edit_group
    from moviemaker.cli.files import files_command, outputs_command
    from moviemaker.cli.inspect import inspect_command
    from moviemaker.cli.serve import serve_command

    main.add_command(edit_group)
    main.add_command(files_command)
    main.add_command(inspect_command)
    main.add_command(outputs_command)
    main.add_command(serve_command)


_register_commands()
