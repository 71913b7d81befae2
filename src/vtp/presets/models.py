"""Pydantic models for preset files.

A preset file is a YAML mapping:

    presets:
      - name: 720p
        format: mp4
        extension: mp4
        default: true
        video: {width: 1280, height: 720, bitrate: 2500k, codec: h264}
        audio: {bitrate: 128k, channels: 2, codec: aac}
    thumbnails: {delay: 0.1, width: 160, columns: 6, format: image2, extension: jpg}
    subtitles: {codec: webvtt, format: webvtt, extension: vtt}

Codec names are looked up in the capability profile's encoder map.
Bitrates accept plain bits per second or an M/k suffix.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def parse_bitrate(bitrate: str | int | float) -> int | None:
    """Parse a bitrate like '10M', '5000k' or 128000 to bits per second.

    Returns:
        Bitrate in bits per second, or None if parsing fails.

    Examples:
        parse_bitrate("10M") -> 10_000_000
        parse_bitrate("5000k") -> 5_000_000
        parse_bitrate(128000) -> 128_000
    """
    if isinstance(bitrate, bool):
        return None
    if isinstance(bitrate, (int, float)):
        return int(bitrate)
    if not bitrate:
        return None

    bitrate = bitrate.strip()
    try:
        if bitrate[-1].casefold() == "m":
            return int(float(bitrate[:-1]) * 1_000_000)
        elif bitrate[-1].casefold() == "k":
            return int(float(bitrate[:-1]) * 1_000)
        else:
            return int(bitrate)
    except (ValueError, IndexError):
        return None


def _validate_bitrate(v: object) -> object:
    if v is None:
        return v
    if not isinstance(v, (str, int, float)):
        return v
    parsed = parse_bitrate(v)
    if parsed is None or parsed <= 0:
        raise ValueError(
            f"Invalid bitrate '{v}'. "
            "Must be a positive number, optionally followed by M or k "
            "(e.g., '5M', '2500k')."
        )
    return parsed


class VideoSectionModel(BaseModel):
    """Video constraints of a preset."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    bitrate: int
    max_bitrate: int | None = None
    codec: str | None = None
    preset: str | None = None

    @field_validator("width", "height")
    @classmethod
    def validate_even(cls, v: int) -> int:
        """Encoders need even frame dimensions."""
        if v % 2:
            raise ValueError(f"Dimension {v} must be even")
        return v

    @field_validator("bitrate", "max_bitrate", mode="before")
    @classmethod
    def validate_bitrate(cls, v: object) -> object:
        """Parse bitrate strings to bits per second."""
        return _validate_bitrate(v)


class AudioSectionModel(BaseModel):
    """Audio constraints of a preset."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bitrate: int
    channels: int | None = Field(default=None, gt=0)
    codec: str | None = None

    @field_validator("bitrate", mode="before")
    @classmethod
    def validate_bitrate(cls, v: object) -> object:
        """Parse bitrate strings to bits per second."""
        return _validate_bitrate(v)


class SubtitleSectionModel(BaseModel):
    """Subtitle section of a preset.

    Without format and extension the subtitles are muxed into the output.
    With both, each subtitle track is extracted to its own file.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    codec: str | None = None
    format: str | None = None
    extension: str | None = None

    @model_validator(mode="after")
    def validate_format_pair(self) -> "SubtitleSectionModel":
        """Require format and extension together."""
        if (self.format is None) != (self.extension is None):
            raise ValueError("subtitle format and extension must be set together")
        return self


class ExtractionSectionModel(BaseModel):
    """Job-level standalone subtitle extraction."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codec: str | None = None
    format: str
    extension: str


class ThumbnailSectionModel(BaseModel):
    """Thumbnail sprite sheet settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    delay: float = Field(gt=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    columns: int = Field(default=6, gt=0)
    codec: str | None = None
    format: str = "image2"
    extension: str = "jpg"

    @field_validator("extension")
    @classmethod
    def strip_dot(cls, v: str) -> str:
        """Accept '.jpg' as well as 'jpg'."""
        return v.lstrip(".")


class PresetModel(BaseModel):
    """One named output preset."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    format: str
    extension: str
    is_default: bool = Field(default=False, alias="default")
    video: VideoSectionModel | None = None
    audio: AudioSectionModel | None = None
    subtitle: SubtitleSectionModel | None = None
    thumbnails: ThumbnailSectionModel | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that would escape the output directory."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid preset name '{v}'")
        return v


class PresetSetModel(BaseModel):
    """Top-level preset file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    presets: list[PresetModel] = Field(min_length=1)
    thumbnails: ThumbnailSectionModel | None = None
    subtitles: ExtractionSectionModel | None = None

    @model_validator(mode="after")
    def validate_unique_names(self) -> "PresetSetModel":
        """Preset names become file names, so they must be unique."""
        seen: set[str] = set()
        for preset in self.presets:
            if preset.name in seen:
                raise ValueError(f"Duplicate preset name '{preset.name}'")
            seen.add(preset.name)
        return self
