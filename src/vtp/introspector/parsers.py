"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into domain objects.
All functions are pure (no I/O, no side effects) for easy testing.
"""

import logging
from pathlib import Path
from typing import Any

from vtp.domain.models import IntrospectionResult, TrackInfo

logger = logging.getLogger(__name__)

_KNOWN_TRACK_TYPES = frozenset({"video", "audio", "subtitle", "attachment"})

# mkvmerge writes per-track statistics as tags, optionally suffixed "-eng"
_FRAME_COUNT_TAGS = ("NUMBER_OF_FRAMES", "NUMBER_OF_FRAMES-eng")
_BITRATE_TAGS = ("BPS", "BPS-eng")


def sanitize_string(value: str | None) -> str | None:
    """Sanitize a string by replacing invalid UTF-8 characters.

    Args:
        value: String value to sanitize.

    Returns:
        Sanitized string or None if input was None.
    """
    if value is None:
        return None
    return value.encode("utf-8", errors="replace").decode("utf-8")


def map_track_type(codec_type: str | None) -> str:
    """Map an ffprobe codec_type to a track type name."""
    if codec_type in _KNOWN_TRACK_TYPES:
        return codec_type
    return "other"


def parse_int(value: Any, field_name: str, file_path: str | None = None) -> int | None:
    """Parse a non-negative integer from an ffprobe value.

    ffprobe reports most numbers as JSON strings ("1200", "N/A"); anything
    that is not a non-negative integer yields None.

    Args:
        value: Raw value from ffprobe JSON.
        field_name: Field name for warning messages.
        file_path: File path context for warnings.

    Returns:
        Parsed value or None if absent or invalid.
    """
    if value is None or value == "N/A":
        return None
    if isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.debug(
            "Ignoring non-integer %s %r in %s",
            field_name,
            value,
            file_path or "unknown",
        )
        return None
    if parsed < 0:
        logger.warning(
            "Invalid negative %s: %d in %s", field_name, parsed, file_path or "unknown"
        )
        return None
    return parsed


def parse_duration(value: str | None) -> float | None:
    """Parse duration string from ffprobe into seconds.

    Args:
        value: Duration string from ffprobe (e.g., "3600.000") or None.

    Returns:
        Duration in seconds as float, or None if parsing fails.
    """
    if value is None:
        return None
    try:
        duration = float(value)
    except (ValueError, TypeError):
        return None
    return duration if duration >= 0 else None


def _first_tag(tags: dict, names: tuple[str, ...]) -> Any:
    for name in names:
        if name in tags:
            return tags[name]
    return None


def parse_stream(
    stream: dict,
    container_duration: float | None = None,
    file_path: str | None = None,
) -> TrackInfo:
    """Parse a single ffprobe stream dict into a TrackInfo.

    Language and title tags are kept as written in the file; selection
    patterns are matched against the raw values.

    Args:
        stream: Stream dictionary from ffprobe JSON.
        container_duration: Fallback duration from container format.
        file_path: Optional file path for context in warning messages.

    Returns:
        TrackInfo domain object.
    """
    track_type = map_track_type(stream.get("codec_type"))

    disposition = stream.get("disposition") or {}
    tags = stream.get("tags") or {}

    frame_count = parse_int(stream.get("nb_frames"), "nb_frames", file_path)
    if frame_count is None:
        frame_count = parse_int(
            _first_tag(tags, _FRAME_COUNT_TAGS), "NUMBER_OF_FRAMES", file_path
        )

    bitrate = parse_int(stream.get("bit_rate"), "bit_rate", file_path)
    if bitrate is None:
        bitrate = parse_int(_first_tag(tags, _BITRATE_TAGS), "BPS", file_path)

    duration = parse_duration(stream.get("duration"))
    if duration is None:
        duration = container_duration

    width = height = channels = None
    if track_type == "video":
        width = parse_int(stream.get("width"), "width", file_path)
        height = parse_int(stream.get("height"), "height", file_path)
    elif track_type == "audio":
        channels = parse_int(stream.get("channels"), "channels", file_path)

    return TrackInfo(
        index=stream.get("index", 0),
        track_type=track_type,
        codec=stream.get("codec_name"),
        language=sanitize_string(tags.get("language")),
        title=sanitize_string(tags.get("title")),
        is_default=disposition.get("default", 0) == 1,
        is_forced=disposition.get("forced", 0) == 1,
        frame_count=frame_count,
        duration_seconds=duration,
        bitrate=bitrate,
        channels=channels,
        width=width,
        height=height,
    )


def parse_streams(
    streams: list[dict],
    container_duration: float | None = None,
    file_path: str | None = None,
) -> tuple[list[TrackInfo], list[str]]:
    """Parse stream data into TrackInfo objects.

    Args:
        streams: List of stream dictionaries from ffprobe.
        container_duration: Container-level duration as fallback.
        file_path: Optional file path for context in warning messages.

    Returns:
        Tuple of (tracks list, warnings list).
    """
    tracks: list[TrackInfo] = []
    warnings: list[str] = []
    seen_indices: set[int] = set()

    for stream in streams:
        index = stream.get("index", 0)

        if index in seen_indices:
            warnings.append(f"Duplicate stream index {index}, skipping")
            continue
        seen_indices.add(index)

        tracks.append(parse_stream(stream, container_duration, file_path))

    return tracks, warnings


def parse_ffprobe_output(path: Path, data: dict) -> IntrospectionResult:
    """Parse ffprobe JSON output into IntrospectionResult.

    Args:
        path: Path to the video file.
        data: Parsed ffprobe JSON output.

    Returns:
        IntrospectionResult with tracks and warnings.
    """
    format_info = data.get("format", {})
    container_duration = parse_duration(format_info.get("duration"))

    tracks, warnings = parse_streams(
        data.get("streams", []), container_duration, str(path)
    )

    if not tracks:
        warnings.append("No streams found in file")

    return IntrospectionResult(
        file_path=path,
        container_format=format_info.get("format_name"),
        tracks=tracks,
        duration_seconds=container_duration,
        warnings=warnings,
    )
