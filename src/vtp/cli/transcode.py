"""CLI transcode command: plan and run a multi-output transcode."""

import json
import logging
import sys
import threading
from pathlib import Path
from typing import Any

import click

from vtp.cli.exit_codes import ExitCode
from vtp.cli.plan import (
    language_option,
    prefix_option,
    prepare_from_cli,
    presets_option,
)
from vtp.compositor import MontageCompositor
from vtp.engine import FFmpegEngine
from vtp.exceptions import CancellationError, ProcessError, VTPError
from vtp.introspector import FFprobeIntrospector, MediaIntrospectionError
from vtp.jobs import JobSupervisor, ProgressEvent, TranscodeResult

logger = logging.getLogger(__name__)


class ProgressDisplay:
    """Single-line progress display for a running job.

    Updates in place using carriage return. Only active when output is a
    TTY and not JSON mode.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = enabled and sys.stdout.isatty()
        self._has_output = False
        self._lock = threading.Lock()

    def on_progress(self, event: ProgressEvent) -> None:
        """Called on an engine thread with each progress event."""
        if not self._enabled:
            return
        if event.percent is not None:
            text = (
                f"Transcoding... {event.percent:5.1f}% "
                f"({event.frames:,}/{event.total_frames:,} frames, "
                f"{event.current_fps:.0f} fps, ETA {_format_eta(event.eta_seconds)})"
            )
        else:
            text = (
                f"Transcoding... {event.frames:,} frames "
                f"({event.current_fps:.0f} fps)"
            )
        with self._lock:
            # \r moves to start of line, \033[K clears to end of line
            sys.stdout.write(f"\r\033[K{text}")
            sys.stdout.flush()
            self._has_output = True

    def finish(self) -> None:
        """Finish the progress line with a newline."""
        with self._lock:
            if self._enabled and self._has_output:
                sys.stdout.write("\n")
                sys.stdout.flush()
                self._has_output = False


def _format_eta(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _format_size(size: int | None) -> str:
    if size is None:
        return "?"
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{value:.0f}{unit}" if unit == "B" else f"{value:.1f}{unit}"
        value /= 1024
    return f"{size}B"


def format_result_human(result: TranscodeResult) -> str:
    """Render a finished job for a terminal."""
    lines = [f"Finished {result.input_path}"]
    for output in result.outputs:
        resolution = (
            f"{output.resolution[0]}x{output.resolution[1]}"
            if output.resolution
            else "-"
        )
        duration = f"{output.duration:.1f}s" if output.duration is not None else "?"
        lines.append(
            f"  {output.name:<12}{resolution:<12}{duration:>10}"
            f"{_format_size(output.size):>12}  {output.file}"
        )
    for subtitle in result.subtitles:
        lines.append(
            f"  {'subtitle':<12}{subtitle.label:<22}"
            f"{_format_size(subtitle.size):>12}  {subtitle.file}"
        )
    if result.thumbnails is not None:
        sheet = result.thumbnails
        lines.append(
            f"  {'thumbnails':<12}{sheet.frame_count} frames "
            f"{sheet.frame_size[0]}x{sheet.frame_size[1]}  {sheet.file}"
        )
    return "\n".join(lines)


def result_to_dict(result: TranscodeResult) -> dict[str, Any]:
    """Convert a TranscodeResult to a JSON-serializable dict."""
    thumbnails = None
    if result.thumbnails is not None:
        thumbnails = {
            "file": str(result.thumbnails.file),
            "columns": result.thumbnails.columns,
            "frame_count": result.thumbnails.frame_count,
            "frame_size": list(result.thumbnails.frame_size),
            "delay": result.thumbnails.delay,
            "size": result.thumbnails.size,
        }
    return {
        "job_id": result.job_id,
        "file": str(result.input_path),
        "outputs": [
            {
                "name": o.name,
                "file": str(o.file),
                "duration": o.duration,
                "resolution": list(o.resolution) if o.resolution else None,
                "size": o.size,
            }
            for o in result.outputs
        ],
        "subtitles": [
            {
                "label": s.label,
                "file": str(s.file),
                "language": s.language,
                "language_639_1": s.language_639_1,
                "language_name": s.language_name,
                "is_default": s.is_default,
                "is_forced": s.is_forced,
                "size": s.size,
            }
            for s in result.subtitles
        ],
        "thumbnails": thumbnails,
    }


@click.command("transcode")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@presets_option
@language_option
@prefix_option
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
@click.pass_context
def transcode_command(
    ctx: click.Context,
    file: Path,
    output_dir: Path,
    presets_path: Path,
    language: str | None,
    prefix: str | None,
    json_output: bool,
) -> None:
    """Transcode FILE into every eligible preset under OUTPUT_DIR.

    Press Ctrl+C to kill the running job.
    """
    from vtp.cli import get_cli_config

    config = get_cli_config(ctx)
    prepared = prepare_from_cli(ctx, file, presets_path, output_dir, language, prefix)

    try:
        engine = FFmpegEngine(
            ffmpeg_path=config.tools.ffmpeg,
            introspector=FFprobeIntrospector(
                ffprobe_path=config.tools.ffprobe,
                timeout=config.jobs.probe_timeout,
            ),
            preview_seconds=config.jobs.preview_seconds,
        )
    except (ProcessError, MediaIntrospectionError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)

    supervisor = JobSupervisor(
        engine,
        MontageCompositor(config.tools.montage, config.tools.identify),
        finalize_workers=config.jobs.finalize_workers,
    )
    progress = ProgressDisplay(enabled=not json_output)
    handle = supervisor.start(prepared.plan, on_progress=progress.on_progress)

    try:
        try:
            result = handle.result()
        except KeyboardInterrupt:
            # User pressed Ctrl+C, kill ffmpeg and wait for the job to end
            handle.kill()
            progress.finish()
            click.echo("\nTranscode aborted by user.", err=True)
            try:
                handle.result()
            except VTPError:
                pass
            sys.exit(ExitCode.INTERRUPTED)
    except CancellationError as e:
        progress.finish()
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.JOB_KILLED)
    except VTPError as e:
        progress.finish()
        click.echo(f"Error: Transcode failed for {file}", err=True)
        click.echo(f"Reason: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    progress.finish()
    if json_output:
        click.echo(json.dumps(result_to_dict(result), indent=2))
    else:
        click.echo(format_result_human(result))
