"""Configuration data models.

This module defines dataclasses for VTP configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from vtp.capabilities.profile import CapabilityProfile

# Software encoders shipped with a stock ffmpeg build, used when the
# config file has no [capabilities] table.
DEFAULT_ENCODERS: dict[str, str] = {
    "h264": "libx264",
    "hevc": "libx265",
    "vp9": "libvpx-vp9",
    "aac": "aac",
    "mp3": "libmp3lame",
    "opus": "libopus",
    "mov_text": "mov_text",
    "webvtt": "webvtt",
    "srt": "srt",
    "ass": "ass",
    "mjpeg": "mjpeg",
    "png": "png",
}


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None
    montage: Path | None = None
    identify: Path | None = None


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class SelectionConfig:
    """Track selection settings.

    A frame count or title pattern of None disables that forced-subtitle
    check.
    """

    preferred_language: str = "^en"
    forced_max_frame_count: int | None = 50
    forced_title_pattern: str | None = "force"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.preferred_language:
            raise ValueError("preferred_language must not be empty")
        if self.forced_max_frame_count is not None and self.forced_max_frame_count < 0:
            raise ValueError(
                "forced_max_frame_count must be non-negative, "
                f"got {self.forced_max_frame_count}"
            )


@dataclass
class JobsConfig:
    """Transcode job settings."""

    # Threads used to finalize outputs after ffmpeg exits
    finalize_workers: int = 4

    # Limit every output to this many seconds (None = full length)
    preview_seconds: int | None = None

    # Seconds before a single ffprobe call is abandoned
    probe_timeout: int = 60

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.finalize_workers < 1:
            raise ValueError(
                f"finalize_workers must be at least 1, got {self.finalize_workers}"
            )
        if self.preview_seconds is not None and self.preview_seconds <= 0:
            raise ValueError(
                f"preview_seconds must be positive, got {self.preview_seconds}"
            )
        if self.probe_timeout <= 0:
            raise ValueError(f"probe_timeout must be positive, got {self.probe_timeout}")


@dataclass
class VTPConfig:
    """Main configuration container for VTP.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    capabilities: CapabilityProfile = field(
        default_factory=lambda: CapabilityProfile.create(encoders=DEFAULT_ENCODERS)
    )

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool.

        Args:
            tool_name: Name of the tool (ffmpeg, ffprobe, montage, identify).

        Returns:
            Configured path or None if not configured.
        """
        return getattr(self.tools, tool_name.lower(), None)
