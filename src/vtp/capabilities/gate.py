"""Capability gate: can this environment produce a planned output?

Checks run section by section and stop at the first failure. A False
result is not an error; callers drop the output and carry on.
"""

import logging
from collections.abc import Iterable

from vtp.capabilities.profile import CapabilityProfile
from vtp.domain.models import TrackInfo
from vtp.presets.types import (
    PlannedAudio,
    PlannedOutput,
    PlannedSubtitle,
    PlannedThumbnails,
    PlannedVideo,
)

logger = logging.getLogger(__name__)

SCALE_FILTER = "scale"
FPS_FILTER = "fps"

# Filters each section's branch of the filter graph uses
_REQUIRED_FILTERS: dict[str, tuple[str, ...]] = {
    "video": (SCALE_FILTER,),
    "thumbnails": (FPS_FILTER, SCALE_FILTER),
}

Section = PlannedVideo | PlannedAudio | PlannedSubtitle | PlannedThumbnails


def _section_tracks(section: Section) -> tuple[TrackInfo, ...]:
    if isinstance(section, (PlannedVideo, PlannedThumbnails)):
        return (section.track,)
    return section.tracks


def can_process_section(
    kind: str, section: Section, profile: CapabilityProfile
) -> bool:
    """Check one section of a planned output against the profile.

    Video sections need the scale filter. Thumbnail sections need both fps
    and scale, since the thumbnail branch samples frames and then resizes
    them.

    Args:
        kind: "video", "audio", "subtitle" or "thumbnails".
        section: The planned section.
        profile: Capability profile of the execution environment.

    Returns:
        True if the encoder, filters and decoders it needs are available.
    """
    if section.codec is not None and not profile.can_encode(section.codec):
        logger.debug("No encoder for %s codec %s", kind, section.codec)
        return False

    for name in _REQUIRED_FILTERS.get(kind, ()):
        if not profile.can_filter(name):
            logger.debug("Filter %s unavailable for %s", name, kind)
            return False

    for track in _section_tracks(section):
        if not profile.can_decode(track.codec, track.track_type):
            logger.debug(
                "Cannot decode %s track #%d (%s)",
                track.track_type,
                track.index,
                track.codec,
            )
            return False

    return True


def can_process(output: PlannedOutput, profile: CapabilityProfile) -> bool:
    """Check whether every section of ``output`` can be produced."""
    for kind, section in output.sections():
        if not can_process_section(kind, section, profile):
            return False
    return True


def filter_processable(
    outputs: Iterable[PlannedOutput], profile: CapabilityProfile
) -> tuple[tuple[PlannedOutput, ...], tuple[PlannedOutput, ...]]:
    """Split outputs into (accepted, rejected), keeping order."""
    accepted: list[PlannedOutput] = []
    rejected: list[PlannedOutput] = []
    for output in outputs:
        if can_process(output, profile):
            accepted.append(output)
        else:
            logger.info("Output %s cannot be processed, skipping", output.name)
            rejected.append(output)
    return tuple(accepted), tuple(rejected)
