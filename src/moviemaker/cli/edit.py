"""CLI edit commands.

Each subcommand builds an edit request, submits it through the
orchestrator and waits for the job to finish. Sources are names in the
upload store, as listed by `moviemaker files`.
"""

import logging
import sys
from concurrent.futures import CancelledError

import click

from moviemaker.cli import load_config
from moviemaker.cli.exit_codes import ExitCode, exit_code_for
from moviemaker.domain import QualityTier
from moviemaker.editing import (
    ConcatRequest,
    ConvertRequest,
    EditRequest,
    FilterRequest,
    TrimRequest,
)
from moviemaker.editing.orchestrator import EditOrchestrator
from moviemaker.exceptions import EngineError, MovieMakerError
from moviemaker.executor.command import SUPPORTED_FORMATS

logger = logging.getLogger(__name__)


def run_edit(orchestrator: EditOrchestrator, request: EditRequest) -> None:
    """Submit a request, wait for it and print the produced artifact.

    Exits the process with a code from ExitCode on any failure.
    """
    try:
        handle = orchestrator.submit(request)
    except MovieMakerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for(e))

    click.echo(f"Queued job {handle.job_id[:8]} -> {handle.output_name}", err=True)
    try:
        artifact = handle.result()
    except KeyboardInterrupt:
        handle.cancel()
        click.echo("Interrupted; cancelling job", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    except CancelledError:
        click.echo("Error: Job was cancelled before it started", err=True)
        sys.exit(ExitCode.JOB_CANCELLED)
    except EngineError as e:
        click.echo(f"Error: {e}", err=True)
        if e.stderr_tail:
            click.echo(e.stderr_tail, err=True)
        sys.exit(exit_code_for(e))

    click.echo(artifact.filename)


def _run(ctx: click.Context, request: EditRequest) -> None:
    config = load_config(ctx)
    orchestrator = EditOrchestrator.from_config(config)
    orchestrator.start()
    try:
        run_edit(orchestrator, request)
    finally:
        orchestrator.shutdown(wait=True, terminate_running=True)


@click.group("edit")
def edit_group() -> None:
    """Derive a new output from uploaded files."""


@edit_group.command("trim")
@click.argument("source")
@click.option("--start", type=float, required=True, help="Start time in seconds.")
@click.option("--end", type=float, required=True, help="End time in seconds.")
@click.pass_context
def trim_command(ctx: click.Context, source: str, start: float, end: float) -> None:
    """Keep the [START, END) window of SOURCE."""
    _run(ctx, TrimRequest(source=source, start=start, end=end))


@edit_group.command("concat")
@click.argument("sources", nargs=-1, required=True)
@click.pass_context
def concat_command(ctx: click.Context, sources: tuple[str, ...]) -> None:
    """Join two or more SOURCES end to end, in the order given."""
    _run(ctx, ConcatRequest(sources=tuple(sources)))


@edit_group.command("convert")
@click.argument("source")
@click.option(
    "--format",
    "-f",
    "target_format",
    type=click.Choice(sorted(SUPPORTED_FORMATS), case_sensitive=False),
    required=True,
    help="Target container format.",
)
@click.option(
    "--quality",
    "-q",
    type=click.Choice([tier.value for tier in QualityTier]),
    default=None,
    help="Bitrate tier (default: let ffmpeg choose).",
)
@click.pass_context
def convert_command(
    ctx: click.Context, source: str, target_format: str, quality: str | None
) -> None:
    """Re-encode SOURCE into another container format."""
    _run(
        ctx,
        ConvertRequest(
            source=source,
            format=target_format.lower(),
            quality=QualityTier(quality) if quality else None,
        ),
    )


@edit_group.command("filter")
@click.argument("source")
@click.option("--brightness", type=float, default=None, help="-1.0 to 1.0.")
@click.option("--contrast", type=float, default=None, help="0.0 and up, 1.0 = unchanged.")
@click.option("--saturation", type=float, default=None, help="0.0 and up, 1.0 = unchanged.")
@click.pass_context
def filter_command(
    ctx: click.Context,
    source: str,
    brightness: float | None,
    contrast: float | None,
    saturation: float | None,
) -> None:
    """Adjust the brightness, contrast or saturation of SOURCE."""
    _run(
        ctx,
        FilterRequest(
            source=source,
            brightness=brightness,
            contrast=contrast,
            saturation=saturation,
        ),
    )
