"""CLI plan command: show what a transcode would produce without running it."""

import json
import logging
import shlex
import sys
from pathlib import Path
from typing import Any

import click

from vtp.cli.exit_codes import ExitCode
from vtp.cli.inspect import probe_file
from vtp.config.models import VTPConfig
from vtp.exceptions import ValidationError
from vtp.executor import render_ffmpeg_command
from vtp.introspector.formatters import format_track_line
from vtp.presets import load_presets
from vtp.selection.forced import ForcedSubtitleHeuristic
from vtp.workflow import PreparedJob, prepare_job

logger = logging.getLogger(__name__)


def presets_option(func):
    return click.option(
        "--presets",
        "-p",
        "presets_path",
        required=True,
        type=click.Path(exists=False, dir_okay=False, path_type=Path),
        help="YAML preset file.",
    )(func)


def language_option(func):
    return click.option(
        "--language",
        "-l",
        default=None,
        help="Preferred language regex (default: from config, '^en').",
    )(func)


def prefix_option(func):
    return click.option(
        "--prefix",
        default=None,
        help="Output file name prefix (default: source file name).",
    )(func)


def prepare_from_cli(
    ctx: click.Context,
    file: Path,
    presets_path: Path,
    output_dir: Path,
    language: str | None,
    prefix: str | None,
) -> PreparedJob:
    """Probe, load presets and plan, exiting with the matching code on failure."""
    from vtp.cli import get_cli_config

    config: VTPConfig = get_cli_config(ctx)

    try:
        presets = load_presets(presets_path)
    except FileNotFoundError:
        click.echo(f"Error: Preset file not found: {presets_path}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.PRESET_VALIDATION_ERROR)

    try:
        heuristic = ForcedSubtitleHeuristic.from_settings(
            max_frame_count=config.selection.forced_max_frame_count,
            title_pattern=config.selection.forced_title_pattern,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    result = probe_file(ctx, file)

    try:
        return prepare_job(
            result,
            presets,
            config.capabilities,
            output_dir,
            preferred_language=language or config.selection.preferred_language,
            heuristic=heuristic,
            prefix=prefix,
        )
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.SELECTION_ERROR)


def _size(resolution: tuple[int, int] | None) -> str:
    return f"{resolution[0]}x{resolution[1]}" if resolution else "-"


def format_plan_human(prepared: PreparedJob, command: list[str]) -> str:
    """Render a prepared job for a terminal."""
    plan = prepared.plan
    selected = prepared.selected
    lines = [f"File: {plan.input_path}", "", "Selected tracks:"]
    for label, track in (
        ("Video", selected.video),
        ("Audio", selected.audio),
        ("Subtitle", selected.subtitle),
    ):
        lines.append(f"  {label + ':':<10}{format_track_line(track) if track else '-'}")

    lines.append("")
    lines.append("Outputs:")
    for spec in plan.av_outputs:
        lines.append(
            f"  {spec.name:<12}{_size(spec.resolution):<12}"
            f"{spec.bitrate // 1000:>8}kb/s  {spec.path}"
        )
    for sub in plan.subtitle_outputs:
        lines.append(f"  {'subtitle':<12}{sub.label:<12}{'':>12}  {sub.path}")
    if plan.thumbnails is not None:
        lines.append(
            f"  {'thumbnails':<12}{'':<12}{'':>12}  {plan.thumbnails.sheet_path}"
        )

    if prepared.rejected:
        lines.append("")
        lines.append("Skipped (not supported by this profile):")
        lines.extend(f"  {o.name}" for o in prepared.rejected)

    lines.append("")
    lines.append("Command:")
    lines.append(f"  {shlex.join(command)}")
    return "\n".join(lines)


def plan_to_dict(prepared: PreparedJob, command: list[str]) -> dict[str, Any]:
    """Convert a prepared job to a JSON-serializable dict."""
    plan = prepared.plan
    selected = prepared.selected
    return {
        "file": str(plan.input_path),
        "selected": {
            "video": selected.video.index if selected.video else None,
            "audio": selected.audio.index,
            "subtitle": selected.subtitle.index if selected.subtitle else None,
        },
        "outputs": [
            {
                "name": spec.name,
                "file": str(spec.path),
                "format": spec.format,
                "resolution": list(spec.resolution) if spec.resolution else None,
                "bitrate": spec.bitrate,
            }
            for spec in plan.av_outputs
        ],
        "subtitles": [
            {
                "label": sub.label,
                "file": str(sub.path),
                "language": sub.language,
                "is_default": sub.is_default,
                "is_forced": sub.is_forced,
            }
            for sub in plan.subtitle_outputs
        ],
        "thumbnails": (
            str(plan.thumbnails.sheet_path) if plan.thumbnails is not None else None
        ),
        "rejected": [o.name for o in prepared.rejected],
        "total_frames": plan.total_frames,
        "command": command,
    }


@click.command("plan")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@presets_option
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory the outputs would be written to.",
)
@language_option
@prefix_option
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.pass_context
def plan_command(
    ctx: click.Context,
    file: Path,
    presets_path: Path,
    output_dir: Path,
    language: str | None,
    prefix: str | None,
    output_format: str,
) -> None:
    """Show the outputs and ffmpeg command planned for FILE."""
    from vtp.cli import get_cli_config

    config = get_cli_config(ctx)
    prepared = prepare_from_cli(ctx, file, presets_path, output_dir, language, prefix)
    command = render_ffmpeg_command(
        prepared.plan,
        config.tools.ffmpeg or "ffmpeg",
        preview_seconds=config.jobs.preview_seconds,
    )
    if output_format == "json":
        click.echo(json.dumps(plan_to_dict(prepared, command), indent=2))
    else:
        click.echo(format_plan_human(prepared, command))
