"""FFmpeg command rendering for job plans.

This module turns a JobPlan into ffmpeg command-line arguments: global and
input options, one ``-filter_complex`` graph and one argument group per
output file.
"""

from __future__ import annotations

from pathlib import Path

from vtp.executor.types import JobPlan


def _output_args(
    maps: tuple[str, ...],
    options: tuple[str, ...],
    fmt: str,
    target: str | Path,
    preview_seconds: int | None,
) -> list[str]:
    args: list[str] = []
    for value in maps:
        args.extend(["-map", value])
    args.extend(options)
    if preview_seconds:
        args.extend(["-t", str(preview_seconds)])
    args.extend(["-f", fmt, str(target)])
    return args


def render_ffmpeg_command(
    plan: JobPlan,
    ffmpeg_path: Path | str = "ffmpeg",
    preview_seconds: int | None = None,
) -> list[str]:
    """Build the ffmpeg command for a job plan.

    Args:
        plan: Job plan to render.
        ffmpeg_path: ffmpeg executable.
        preview_seconds: Limit every output to this many seconds.

    Returns:
        List of command arguments.
    """
    cmd = [str(ffmpeg_path), "-y", "-hide_banner", "-nostdin"]

    # Progress output to stderr
    cmd.extend(["-stats_period", "1"])

    cmd.extend(plan.input_options)
    cmd.extend(["-i", str(plan.input_path)])

    if plan.filter_graph:
        cmd.extend(["-filter_complex", ";".join(plan.filter_graph)])

    for output in plan.av_outputs:
        cmd.extend(
            _output_args(
                output.maps, output.options, output.format, output.path, preview_seconds
            )
        )

    for subtitle in plan.subtitle_outputs:
        cmd.extend(
            _output_args(
                subtitle.maps,
                subtitle.options,
                subtitle.format,
                subtitle.path,
                preview_seconds,
            )
        )

    if plan.thumbnails is not None:
        branch = plan.thumbnails
        cmd.extend(
            _output_args(
                branch.maps, branch.options, branch.format, branch.pattern, preview_seconds
            )
        )

    return cmd
