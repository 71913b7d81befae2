"""Core utilities shared across Video Transcode Planner modules."""

from vtp.core.codecs import (
    BITMAP_SUBTITLE_CODECS,
    is_bitmap_subtitle,
    normalize_codec,
    to_kilobits,
)
from vtp.core.file_utils import (
    frame_number,
    list_frames,
    remove_directory,
    stat_file_size,
)
from vtp.core.subprocess_utils import run_command

__all__ = [
    # Codecs
    "BITMAP_SUBTITLE_CODECS",
    "is_bitmap_subtitle",
    "normalize_codec",
    "to_kilobits",
    # Files
    "frame_number",
    "list_frames",
    "remove_directory",
    "stat_file_size",
    # Subprocess
    "run_command",
]
