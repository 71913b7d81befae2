"""Track cataloguing and selection."""

from vtp.selection.catalog import build_descriptor, classify_tracks
from vtp.selection.forced import DEFAULT_HEURISTIC, ForcedSubtitleHeuristic
from vtp.selection.selector import (
    AudioSubtitleSelection,
    matches_language,
    select_audio_and_subtitle,
    select_tracks,
    select_video,
)

__all__ = [
    "build_descriptor",
    "classify_tracks",
    "DEFAULT_HEURISTIC",
    "ForcedSubtitleHeuristic",
    "AudioSubtitleSelection",
    "matches_language",
    "select_audio_and_subtitle",
    "select_tracks",
    "select_video",
]
