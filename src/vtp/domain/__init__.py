"""Domain models and enums for Video Transcode Planner.

This package contains the core domain types shared by every pipeline stage:

- Domain models: TrackInfo, IntrospectionResult, MediaDescriptor,
  SelectedTracks
- Domain enums: TrackType, JobState

Usage:
    from vtp.domain import TrackInfo, MediaDescriptor
    from vtp.domain import JobState
"""

from .enums import JobState, TrackType
from .models import (
    IntrospectionResult,
    MediaDescriptor,
    SelectedTracks,
    TrackInfo,
)

__all__ = [
    # Models
    "TrackInfo",
    "IntrospectionResult",
    "MediaDescriptor",
    "SelectedTracks",
    # Enums
    "TrackType",
    "JobState",
]
