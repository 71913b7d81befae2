"""Domain models for Video Transcode Planner.

This module contains the core value types shared by every stage of the
planning pipeline. All of them are frozen: later stages derive new values
instead of mutating the ones they were given.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass(frozen=True)
class TrackInfo:
    """Represents a media track within a video file (domain model)."""

    index: int
    track_type: str  # "video", "audio", "subtitle", "attachment", "other"
    codec: str | None = None
    language: str | None = None
    title: str | None = None
    is_default: bool = False
    is_forced: bool = False
    # Frame/cue count (nb_frames, or mkvmerge NUMBER_OF_FRAMES statistics tag)
    frame_count: int | None = None
    duration_seconds: float | None = None
    bitrate: int | None = None  # bits per second
    # Audio-specific fields
    channels: int | None = None
    # Video-specific fields
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class IntrospectionResult:
    """Result of media file introspection."""

    file_path: Path
    container_format: str | None
    tracks: list[TrackInfo]
    duration_seconds: float | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def primary_video_track(self) -> TrackInfo | None:
        """Return the first video track, or None if no video tracks exist."""
        return next((t for t in self.tracks if t.track_type == "video"), None)


@dataclass(frozen=True)
class SelectedTracks:
    """Tracks chosen to feature by default in every output."""

    audio: TrackInfo
    video: TrackInfo | None = None
    subtitle: TrackInfo | None = None


@dataclass(frozen=True)
class MediaDescriptor:
    """A probed media file with its tracks bucketed by type.

    Bucket order is probe order; "first" always means first in this order.
    """

    path: Path
    video_tracks: tuple[TrackInfo, ...] = ()
    audio_tracks: tuple[TrackInfo, ...] = ()
    subtitle_tracks: tuple[TrackInfo, ...] = ()
    container_format: str | None = None
    duration_seconds: float | None = None
    selected: SelectedTracks | None = None

    @property
    def tracks(self) -> tuple[TrackInfo, ...]:
        """Return every catalogued track sorted by stream index."""
        return tuple(
            sorted(
                self.video_tracks + self.audio_tracks + self.subtitle_tracks,
                key=lambda t: t.index,
            )
        )

    def with_selection(self, selected: SelectedTracks) -> "MediaDescriptor":
        """Return a copy of this descriptor carrying ``selected``."""
        return replace(self, selected=selected)
