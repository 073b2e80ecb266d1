"""CLI inspect command for Movie Maker."""

import logging
import sys
from pathlib import Path

import click

from moviemaker.cli import load_config
from moviemaker.cli.exit_codes import ExitCode
from moviemaker.exceptions import EngineError
from moviemaker.introspector import FFprobeProbe, format_human, format_json

logger = logging.getLogger(__name__)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human).",
)
@click.pass_context
def inspect_command(ctx: click.Context, file: Path, output_format: str) -> None:
    """Probe a media file and print its container and stream metadata.

    FILE is a path on disk; it does not need to be in the upload store.
    """
    if not file.is_file():
        click.echo(f"Error: File not found: {file}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)

    config = load_config(ctx)
    probe = FFprobeProbe(ffprobe_path=config.tools.ffprobe)
    try:
        probe.tool_path
    except EngineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)

    try:
        result = probe.probe(file)
    except EngineError as e:
        click.echo(f"Error: Could not parse file: {file}", err=True)
        click.echo(f"Reason: {e}", err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    if output_format == "json":
        click.echo(format_json(result))
    else:
        click.echo(format_human(result))
