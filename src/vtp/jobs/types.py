"""Result and progress types for supervised jobs."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ProgressEvent:
    """One progress update of a running job.

    Attributes:
        job_id: Job the update belongs to.
        frames: Frames processed so far.
        current_fps: Current encoding speed in frames per second.
        total_frames: Largest frame count among the tracks feeding any
            output (worst-case estimate, 0 when unknown).
        eta_seconds: (total_frames - frames) / max(current_fps, 1).
        percent: frames / total_frames as a percentage, None when unknown.
        raw: The engine's stats line.
    """

    job_id: str
    frames: int
    current_fps: float
    total_frames: int
    eta_seconds: float
    percent: float | None = None
    raw: str = ""


@dataclass(frozen=True)
class OutputResult:
    """A produced audio/video file."""

    name: str
    file: Path
    duration: float | None = None
    resolution: tuple[int, int] | None = None
    size: int | None = None


@dataclass(frozen=True)
class SubtitleResult:
    """A produced standalone subtitle file and its display metadata."""

    label: str
    file: Path
    language: str | None = None
    language_639_1: str | None = None
    language_name: str | None = None
    is_default: bool = False
    is_forced: bool = False
    size: int | None = None


@dataclass(frozen=True)
class ThumbnailSheet:
    """A composed thumbnail sprite sheet.

    Attributes:
        frame_size: (width, height) of one tile.
        delay: Frame sampling rate passed to the fps filter.
    """

    file: Path
    columns: int
    frame_count: int
    frame_size: tuple[int, int]
    delay: float
    size: int | None = None


@dataclass(frozen=True)
class TranscodeResult:
    """Aggregated result of a finished job."""

    job_id: str
    input_path: Path
    outputs: tuple[OutputResult, ...] = ()
    subtitles: tuple[SubtitleResult, ...] = ()
    thumbnails: ThumbnailSheet | None = None
    transit_data: Any = field(default=None, compare=False)
