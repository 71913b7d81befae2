"""Planning pipeline from probed metadata to a runnable job plan.

Each stage is a pure function taking the previous stage's result:
catalog, select, plan, gate, build. ``prepare_job`` runs them in order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from vtp.capabilities.gate import can_process_section, filter_processable
from vtp.capabilities.profile import CapabilityProfile
from vtp.domain.models import IntrospectionResult, MediaDescriptor, SelectedTracks
from vtp.exceptions import ValidationError
from vtp.executor.builder import build_job_plan
from vtp.executor.types import JobPlan
from vtp.presets.planner import (
    find_default_preset,
    plan_outputs,
    plan_subtitle_extraction,
    plan_thumbnails,
)
from vtp.presets.types import (
    PlannedOutput,
    PlannedSubtitle,
    PlannedThumbnails,
    PresetSet,
)
from vtp.selection.catalog import build_descriptor
from vtp.selection.forced import DEFAULT_HEURISTIC, ForcedSubtitleHeuristic
from vtp.selection.selector import select_tracks

logger = logging.getLogger(__name__)

_UNSAFE_PREFIX_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class PreparedJob:
    """Everything decided before a job is started.

    Attributes:
        descriptor: Catalogued source carrying the track selection.
        accepted: Planned outputs the profile can produce, in plan order.
        rejected: Planned outputs the profile cannot produce.
        thumbnails: Job-level thumbnail request, if any survived gating.
        subtitle_extraction: Job-level subtitle extraction, if any.
        plan: The built job plan.
    """

    descriptor: MediaDescriptor
    accepted: tuple[PlannedOutput, ...]
    rejected: tuple[PlannedOutput, ...]
    thumbnails: PlannedThumbnails | None
    subtitle_extraction: PlannedSubtitle | None
    plan: JobPlan

    @property
    def selected(self) -> SelectedTracks:
        assert self.descriptor.selected is not None
        return self.descriptor.selected


def default_prefix(path: Path) -> str:
    """File name prefix for outputs derived from the source file name."""
    prefix = _UNSAFE_PREFIX_CHARS.sub("_", path.stem).strip("._")
    return prefix or "output"


def _job_thumbnails(
    presets: PresetSet,
    selected: SelectedTracks,
    accepted: tuple[PlannedOutput, ...],
    profile: CapabilityProfile,
) -> PlannedThumbnails | None:
    thumbnails = None
    if presets.thumbnails is not None:
        if selected.video is None:
            logger.warning("Thumbnails requested but no video track is selected")
            return None
        thumbnails = plan_thumbnails(selected, presets.thumbnails)
    else:
        thumbnails = next(
            (o.thumbnails for o in accepted if o.thumbnails is not None), None
        )
    if thumbnails is not None and not can_process_section(
        "thumbnails", thumbnails, profile
    ):
        logger.warning("Thumbnails cannot be produced with this profile, skipping")
        return None
    return thumbnails


def _job_subtitle_extraction(
    presets: PresetSet,
    descriptor: MediaDescriptor,
    accepted: tuple[PlannedOutput, ...],
    profile: CapabilityProfile,
) -> PlannedSubtitle | None:
    extraction = None
    if presets.subtitles is not None:
        extraction = plan_subtitle_extraction(
            descriptor.subtitle_tracks, presets.subtitles
        )
    else:
        extraction = next(
            (
                o.subtitle
                for o in accepted
                if o.subtitle is not None and o.subtitle.is_extraction
            ),
            None,
        )
    if extraction is not None and not can_process_section(
        "subtitle", extraction, profile
    ):
        logger.warning(
            "Subtitle extraction cannot be produced with this profile, skipping"
        )
        return None
    return extraction


def prepare_job(
    result: IntrospectionResult,
    presets: PresetSet,
    profile: CapabilityProfile,
    output_dir: Path,
    *,
    preferred_language: str | re.Pattern[str] = "^en",
    heuristic: ForcedSubtitleHeuristic = DEFAULT_HEURISTIC,
    prefix: str | None = None,
) -> PreparedJob:
    """Plan a job for a probed source file.

    Args:
        result: ffprobe metadata of the source.
        presets: Loaded preset file.
        profile: Capability profile of the execution environment.
        output_dir: Directory receiving every produced file.
        preferred_language: Regex searched in language and title tags.
        heuristic: Forced-subtitle detector.
        prefix: File name prefix. Defaults to the source file's stem.

    Returns:
        The prepared job.

    Raises:
        ValidationError: If selection, planning or building fails, or if the
            profile can produce none of the planned outputs.
    """
    descriptor = build_descriptor(result)
    require_video = any(p.video is not None for p in presets.presets)
    descriptor = select_tracks(
        descriptor, preferred_language, heuristic, require_video=require_video
    )
    selected = descriptor.selected
    assert selected is not None

    default_preset = find_default_preset(presets.presets)
    planned = plan_outputs(
        selected,
        presets.presets,
        default_preset,
        subtitle_tracks=descriptor.subtitle_tracks,
    )

    accepted, rejected = filter_processable(planned, profile)
    if not accepted:
        raise ValidationError(
            "None of the planned outputs can be produced: "
            + ", ".join(o.name for o in rejected),
            field="presets",
        )

    thumbnails = _job_thumbnails(presets, selected, accepted, profile)
    extraction = _job_subtitle_extraction(presets, descriptor, accepted, profile)

    plan = build_job_plan(
        descriptor,
        selected,
        accepted,
        profile,
        output_dir,
        prefix or default_prefix(result.file_path),
        thumbnails=thumbnails,
        subtitle_extraction=extraction,
    )
    logger.info(
        "Prepared job for %s: %d output(s), %d rejected",
        result.file_path,
        len(accepted),
        len(rejected),
        extra={"outputs": plan.output_count},
    )
    return PreparedJob(
        descriptor=descriptor,
        accepted=accepted,
        rejected=rejected,
        thumbnails=thumbnails,
        subtitle_extraction=extraction,
        plan=plan,
    )
