"""CLI commands for listing stored files."""

import json

import click

from moviemaker.cli import load_config
from moviemaker.storage import AssetStore, OutputStore


def _format_size(size: int) -> str:
    """Format a byte count for a listing column."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def _emit(records: list, label: str, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return
    if not records:
        click.echo(f"No {label} found.")
        return
    width = max(len(r.filename) for r in records)
    for record in records:
        data = record.to_dict()
        when = data.get("uploadedAt") or data.get("createdAt")
        extra = data.get("mediaKind") or data.get("operation") or "-"
        click.echo(
            f"{record.filename:<{width}}  {_format_size(record.size):>10}  "
            f"{when}  {extra}"
        )


@click.command("files")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def files_command(ctx: click.Context, json_output: bool) -> None:
    """List uploaded source files."""
    config = load_config(ctx)
    store = AssetStore(config.upload_dir, create=False)
    _emit(store.list(), "uploaded files", json_output)


@click.command("outputs")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def outputs_command(ctx: click.Context, json_output: bool) -> None:
    """List files produced by completed edits."""
    config = load_config(ctx)
    store = OutputStore(config.output_dir, create=False)
    _emit(store.list(), "outputs", json_output)
