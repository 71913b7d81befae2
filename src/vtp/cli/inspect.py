"""CLI inspect command for Video Transcode Planner."""

import logging
import sys
from pathlib import Path

import click

from vtp.cli.exit_codes import ExitCode
from vtp.introspector import (
    FFprobeIntrospector,
    MediaIntrospectionError,
    format_human,
    format_json,
)

logger = logging.getLogger(__name__)


def probe_file(ctx: click.Context, file_path: Path):
    """Probe ``file_path``, exiting with the matching code on failure."""
    from vtp.cli import get_cli_config

    if not file_path.exists():
        click.echo(f"Error: File not found: {file_path}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)

    config = get_cli_config(ctx)
    try:
        introspector = FFprobeIntrospector(
            ffprobe_path=config.tools.ffprobe, timeout=config.jobs.probe_timeout
        )
    except MediaIntrospectionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.FFPROBE_NOT_FOUND)

    try:
        return introspector.get_file_info(file_path)
    except MediaIntrospectionError as e:
        click.echo(f"Error: Could not parse file: {file_path}", err=True)
        click.echo(f"Reason: {e}", err=True)
        sys.exit(ExitCode.PARSE_ERROR)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.pass_context
def inspect_command(ctx: click.Context, file: Path, output_format: str) -> None:
    """Inspect a media file and display track information.

    FILE is the path to the media file to inspect.
    """
    result = probe_file(ctx, file)
    if output_format == "json":
        click.echo(format_json(result))
    else:
        click.echo(format_human(result))
