"""Output presets: loading, validation and per-source planning."""

from vtp.presets.loader import load_presets, load_presets_from_dict
from vtp.presets.planner import (
    derive_dimensions,
    effective_bitrate,
    find_default_preset,
    plan_outputs,
    plan_subtitle_extraction,
    plan_thumbnails,
)
from vtp.presets.types import (
    PlannedAudio,
    PlannedOutput,
    PlannedSubtitle,
    PlannedThumbnails,
    PlannedVideo,
    PresetSet,
    PresetSpec,
)

__all__ = [
    "load_presets",
    "load_presets_from_dict",
    "derive_dimensions",
    "effective_bitrate",
    "find_default_preset",
    "plan_outputs",
    "plan_subtitle_extraction",
    "plan_thumbnails",
    "PlannedAudio",
    "PlannedOutput",
    "PlannedSubtitle",
    "PlannedThumbnails",
    "PlannedVideo",
    "PresetSet",
    "PresetSpec",
]
