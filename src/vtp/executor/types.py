"""Job plan types.

A JobPlan is static data describing one ffmpeg invocation with several
outputs. It is built once, never mutated and may be read from any thread.
"""

from dataclasses import dataclass
from pathlib import Path

from vtp.domain.models import TrackInfo


@dataclass(frozen=True)
class AVOutputSpec:
    """One audio/video output file.

    Attributes:
        name: Preset name.
        path: Output file path.
        format: ffmpeg muxer name (``-f``).
        maps: ``-map`` values, filter labels or ``0:N`` stream specifiers.
        options: Codec and rate options for this output.
        bitrate: Combined video and audio bitrate, bits per second.
        resolution: (width, height) when the output carries video.
        duration: Source video duration, backfilled by re-probing if None.
        tracks: Source tracks feeding this output.
    """

    name: str
    path: Path
    format: str
    maps: tuple[str, ...]
    options: tuple[str, ...] = ()
    bitrate: int = 0
    resolution: tuple[int, int] | None = None
    duration: float | None = None
    tracks: tuple[TrackInfo, ...] = ()

    @property
    def has_video(self) -> bool:
        return self.resolution is not None


@dataclass(frozen=True)
class SubtitleOutputSpec:
    """One standalone subtitle file with its display metadata."""

    track: TrackInfo
    path: Path
    format: str
    maps: tuple[str, ...]
    options: tuple[str, ...]
    label: str
    language: str | None = None
    language_639_1: str | None = None
    language_name: str | None = None
    is_default: bool = False
    is_forced: bool = False


@dataclass(frozen=True)
class ThumbnailBranch:
    """Still-frame capture feeding the thumbnail sprite sheet.

    Attributes:
        track: Video track the frames are sampled from.
        directory: Working directory for numbered stills. Removed after
            the sprite sheet is composed.
        pattern: ffmpeg output pattern for the stills.
        sheet_path: Destination of the composed sprite sheet.
    """

    track: TrackInfo
    directory: Path
    pattern: str
    format: str
    maps: tuple[str, ...]
    options: tuple[str, ...]
    delay: float
    columns: int
    sheet_path: Path


@dataclass(frozen=True)
class JobPlan:
    """Everything the transcoding engine needs to run one job."""

    input_path: Path
    output_dir: Path
    prefix: str
    input_options: tuple[str, ...] = ()
    filter_graph: tuple[str, ...] = ()
    av_outputs: tuple[AVOutputSpec, ...] = ()
    subtitle_outputs: tuple[SubtitleOutputSpec, ...] = ()
    thumbnails: ThumbnailBranch | None = None
    total_frames: int = 0

    @property
    def output_count(self) -> int:
        """Number of files ffmpeg writes (the still sequence counts once)."""
        return (
            len(self.av_outputs)
            + len(self.subtitle_outputs)
            + (1 if self.thumbnails else 0)
        )
