"""Formatters for introspection results.

Used by the ``vtp inspect`` command to render an IntrospectionResult for a
terminal or as JSON.
"""

import json
from dataclasses import asdict
from typing import Any

from vtp.domain.models import IntrospectionResult, TrackInfo


def format_human(result: IntrospectionResult) -> str:
    """Format introspection result for human-readable output."""
    lines: list[str] = [f"File: {result.file_path}"]
    if result.container_format:
        container = result.container_format.split(",")[0].title()
        lines.append(f"Container: {container}")
    if result.duration_seconds is not None:
        lines.append(f"Duration: {result.duration_seconds:.2f}s")
    lines.append("")
    lines.append("Tracks:")

    groups = (
        ("Video", "video"),
        ("Audio", "audio"),
        ("Subtitles", "subtitle"),
    )
    for heading, track_type in groups:
        tracks = [t for t in result.tracks if t.track_type == track_type]
        if tracks:
            lines.append(f"  {heading}:")
            lines.extend(f"    {format_track_line(t)}" for t in tracks)

    if not result.tracks:
        lines.append("  (no tracks found)")

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        for warning in result.warnings:
            lines.append(f"  - {warning}")

    return "\n".join(lines)


def format_track_line(track: TrackInfo) -> str:
    """Format a single track for human output."""
    parts = [f"#{track.index}", f"[{track.track_type}]"]

    if track.codec:
        parts.append(track.codec)
    if track.width and track.height:
        parts.append(f"{track.width}x{track.height}")
    if track.channels:
        parts.append(f"{track.channels}ch")
    if track.bitrate:
        parts.append(f"{track.bitrate // 1000}kb/s")
    if track.language and track.language != "und":
        parts.append(track.language)
    if track.title:
        parts.append(f'"{track.title}"')
    if track.frame_count is not None:
        parts.append(f"{track.frame_count} frames")

    flags = []
    if track.is_default:
        flags.append("default")
    if track.is_forced:
        flags.append("forced")
    if flags:
        parts.append(f"({', '.join(flags)})")

    return " ".join(parts)


def result_to_dict(result: IntrospectionResult) -> dict[str, Any]:
    """Convert an IntrospectionResult to a JSON-serializable dict."""
    return {
        "file": str(result.file_path),
        "container": result.container_format,
        "duration": result.duration_seconds,
        "tracks": [asdict(t) for t in result.tracks],
        "warnings": list(result.warnings),
    }


def format_json(result: IntrospectionResult) -> str:
    """Format introspection result as JSON."""
    return json.dumps(result_to_dict(result), indent=2)
