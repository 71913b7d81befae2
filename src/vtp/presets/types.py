"""Preset and planned-output value types.

PresetSpec is the declared template loaded from a preset file. PlannedOutput
is that template resolved against the selected tracks of one source file.
Both are immutable; the planner derives new values rather than merging
dictionaries.
"""

from dataclasses import dataclass

from vtp.domain.models import TrackInfo


@dataclass(frozen=True)
class VideoConstraints:
    """Declared video section of a preset."""

    width: int
    height: int
    bitrate: int
    max_bitrate: int | None = None
    codec: str | None = None
    preset: str | None = None


@dataclass(frozen=True)
class AudioConstraints:
    """Declared audio section of a preset."""

    bitrate: int
    channels: int | None = None
    codec: str | None = None


@dataclass(frozen=True)
class SubtitleConstraints:
    """Declared subtitle section.

    With format and extension set this describes standalone extraction,
    otherwise muxing into the AV output.
    """

    codec: str | None = None
    format: str | None = None
    extension: str | None = None

    @property
    def is_extraction(self) -> bool:
        return self.format is not None and self.extension is not None


@dataclass(frozen=True)
class ThumbnailConstraints:
    """Declared thumbnail sprite sheet settings."""

    delay: float
    width: int | None = None
    height: int | None = None
    columns: int = 6
    codec: str | None = None
    format: str = "image2"
    extension: str = "jpg"


@dataclass(frozen=True)
class PresetSpec:
    """A named output template."""

    name: str
    format: str
    extension: str
    is_default: bool = False
    video: VideoConstraints | None = None
    audio: AudioConstraints | None = None
    subtitle: SubtitleConstraints | None = None
    thumbnails: ThumbnailConstraints | None = None


@dataclass(frozen=True)
class PresetSet:
    """Contents of a preset file."""

    presets: tuple[PresetSpec, ...]
    thumbnails: ThumbnailConstraints | None = None
    subtitles: SubtitleConstraints | None = None


@dataclass(frozen=True)
class PlannedVideo:
    """Video section resolved against the selected video track."""

    track: TrackInfo
    width: int
    height: int
    bitrate: int
    max_bitrate: int
    codec: str | None = None
    preset: str | None = None


@dataclass(frozen=True)
class PlannedAudio:
    """Audio section resolved against the selected audio track(s)."""

    tracks: tuple[TrackInfo, ...]
    bitrate: int
    channels: int | None = None
    codec: str | None = None


@dataclass(frozen=True)
class PlannedSubtitle:
    """Subtitle section resolved against the subtitle tracks it carries."""

    tracks: tuple[TrackInfo, ...]
    codec: str | None = None
    format: str | None = None
    extension: str | None = None

    @property
    def is_extraction(self) -> bool:
        return self.format is not None and self.extension is not None


@dataclass(frozen=True)
class PlannedThumbnails:
    """Thumbnail section resolved against the selected video track."""

    track: TrackInfo
    delay: float
    width: int | None = None
    height: int | None = None
    columns: int = 6
    codec: str | None = None
    format: str = "image2"
    extension: str = "jpg"


@dataclass(frozen=True)
class PlannedOutput:
    """A preset resolved into concrete encode parameters for one source."""

    name: str
    format: str
    extension: str
    video: PlannedVideo | None = None
    audio: PlannedAudio | None = None
    subtitle: PlannedSubtitle | None = None
    thumbnails: PlannedThumbnails | None = None
    is_fallback: bool = False

    @property
    def combined_bitrate(self) -> int:
        """Video plus audio bitrate, used to order outputs."""
        video = self.video.bitrate if self.video else 0
        audio = self.audio.bitrate if self.audio else 0
        return video + audio

    def sections(self) -> list[tuple[str, object]]:
        """Return (kind, section) pairs for every section present."""
        pairs: list[tuple[str, object]] = []
        for kind in ("video", "audio", "subtitle", "thumbnails"):
            section = getattr(self, kind)
            if section is not None:
                pairs.append((kind, section))
        return pairs
