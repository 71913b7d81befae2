"""Per-preset encode parameter derivation.

For each preset the planner decides whether the source is large enough to
produce it, derives the output geometry from the source aspect ratio and
caps bitrates at the preset ceiling. When nothing qualifies, the default
preset is used at the source's own dimensions so a request always yields
at least one output.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from vtp.core.codecs import is_bitmap_subtitle
from vtp.domain.models import SelectedTracks, TrackInfo
from vtp.exceptions import ValidationError
from vtp.presets.types import (
    AudioConstraints,
    PlannedAudio,
    PlannedOutput,
    PlannedSubtitle,
    PlannedThumbnails,
    PlannedVideo,
    PresetSpec,
    SubtitleConstraints,
    ThumbnailConstraints,
    VideoConstraints,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def make_even(value: int) -> int:
    """Nudge an odd dimension up by one."""
    return value + value % 2


def effective_bitrate(source: int | float | str | None, declared: int) -> int:
    """Pick the bitrate for an output stream.

    The source bitrate is used when it is known, numeric, positive and
    strictly below the preset's declared bitrate. Otherwise the declared
    bitrate applies, so low-bitrate sources are not inflated and
    high-bitrate sources are capped.

    Args:
        source: Source stream bitrate (None, "N/A", numeric string or number).
        declared: Preset bitrate ceiling.

    Returns:
        Bitrate in bits per second.
    """
    if source is None or isinstance(source, bool):
        return declared
    if isinstance(source, str):
        try:
            source = float(source)
        except ValueError:
            return declared
    if not math.isfinite(source) or source <= 0:
        return declared
    if source < declared:
        return int(source)
    return declared


def find_default_preset(presets: Sequence[PresetSpec]) -> PresetSpec:
    """Return the single preset marked as default.

    Raises:
        ValidationError: If zero or several presets are marked default.
    """
    defaults = [p for p in presets if p.is_default]
    if not defaults:
        raise ValidationError("No default preset defined", field="default")
    if len(defaults) > 1:
        names = ", ".join(p.name for p in defaults)
        raise ValidationError(
            f"Exactly one default preset allowed, found {len(defaults)}: {names}",
            field="default",
        )
    return defaults[0]


def derive_dimensions(
    source: TrackInfo, constraints: VideoConstraints
) -> tuple[int, int] | None:
    """Fit a preset's frame size to the source aspect ratio.

    Returns:
        (width, height), or None if the source is smaller than the preset
        in both dimensions or its dimensions are unknown.
    """
    if not source.width or not source.height:
        return None

    if source.height >= constraints.height:
        width = make_even(
            round_half_up(source.width * constraints.height / source.height)
        )
        return width, constraints.height

    if source.width >= constraints.width:
        height = make_even(
            round_half_up(source.height * constraints.width / source.width)
        )
        return constraints.width, height

    return None


def _plan_video(
    track: TrackInfo, constraints: VideoConstraints, width: int, height: int
) -> PlannedVideo:
    return PlannedVideo(
        track=track,
        width=width,
        height=height,
        bitrate=effective_bitrate(track.bitrate, constraints.bitrate),
        max_bitrate=constraints.max_bitrate or constraints.bitrate,
        codec=constraints.codec,
        preset=constraints.preset,
    )


def _plan_audio(track: TrackInfo, constraints: AudioConstraints) -> PlannedAudio:
    return PlannedAudio(
        tracks=(track,),
        bitrate=effective_bitrate(track.bitrate, constraints.bitrate),
        channels=constraints.channels,
        codec=constraints.codec,
    )


def text_subtitle_tracks(tracks: Iterable[TrackInfo]) -> tuple[TrackInfo, ...]:
    """Return the subtitle tracks that can be muxed as text."""
    return tuple(t for t in tracks if not is_bitmap_subtitle(t.codec))


def plan_subtitles(
    tracks: Iterable[TrackInfo], constraints: SubtitleConstraints
) -> PlannedSubtitle | None:
    """Resolve a subtitle section against the text subtitle tracks.

    Bitmap tracks are left out: they cannot be muxed or extracted as text.

    Returns:
        PlannedSubtitle, or None if no text subtitle track exists.
    """
    text_tracks = text_subtitle_tracks(tracks)
    if not text_tracks:
        return None
    return PlannedSubtitle(
        tracks=text_tracks,
        codec=constraints.codec,
        format=constraints.format,
        extension=constraints.extension,
    )


def plan_subtitle_extraction(
    tracks: Iterable[TrackInfo], constraints: SubtitleConstraints
) -> PlannedSubtitle | None:
    """Plan standalone extraction of every text subtitle track.

    Raises:
        ValidationError: If the section lacks a format or extension.
    """
    if not constraints.is_extraction:
        raise ValidationError(
            "Subtitle extraction requires a format and an extension",
            field="subtitles",
        )
    return plan_subtitles(tracks, constraints)


def plan_thumbnails(
    selected: SelectedTracks, constraints: ThumbnailConstraints
) -> PlannedThumbnails:
    """Resolve a thumbnail section against the selected video track.

    Raises:
        ValidationError: If no video track is selected.
    """
    if selected.video is None:
        raise ValidationError(
            "Thumbnails require a selected video track", field="thumbnails"
        )
    return PlannedThumbnails(
        track=selected.video,
        delay=constraints.delay,
        width=constraints.width,
        height=constraints.height,
        columns=constraints.columns,
        codec=constraints.codec,
        format=constraints.format,
        extension=constraints.extension,
    )


def merge_preset(
    preset: PresetSpec,
    selected: SelectedTracks,
    dimensions: tuple[int, int] | None,
    subtitle_tracks: Sequence[TrackInfo] = (),
    is_fallback: bool = False,
) -> PlannedOutput:
    """Combine a preset with selected tracks and derived geometry.

    Args:
        preset: Declared template.
        selected: Selected tracks.
        dimensions: Output frame size for the video section. Ignored when
            the preset or the selection has no video.
        subtitle_tracks: Subtitle tracks of the source.
        is_fallback: Mark the result as the default-preset fallback.
    """
    video = None
    if preset.video and selected.video and dimensions:
        video = _plan_video(selected.video, preset.video, *dimensions)

    audio = _plan_audio(selected.audio, preset.audio) if preset.audio else None

    subtitle = None
    if preset.subtitle:
        subtitle = plan_subtitles(subtitle_tracks, preset.subtitle)

    thumbnails = None
    if preset.thumbnails:
        if selected.video is None:
            logger.warning(
                "Preset %s requests thumbnails but no video track is selected",
                preset.name,
            )
        else:
            thumbnails = plan_thumbnails(selected, preset.thumbnails)

    return PlannedOutput(
        name=preset.name,
        format=preset.format,
        extension=preset.extension,
        video=video,
        audio=audio,
        subtitle=subtitle,
        thumbnails=thumbnails,
        is_fallback=is_fallback,
    )


def plan_outputs(
    selected: SelectedTracks,
    presets: Sequence[PresetSpec],
    default_preset: PresetSpec,
    *,
    subtitle_tracks: Sequence[TrackInfo] = (),
) -> tuple[PlannedOutput, ...]:
    """Plan every eligible preset for the selected tracks.

    A preset with a video section is eligible when the source reaches its
    height, or failing that its width. Presets without a video section are
    always eligible. Without a selected video track video sections are
    left out.

    Args:
        selected: Tracks chosen by the selector.
        presets: Presets to plan, in declared order.
        default_preset: Preset used at source dimensions when none qualify.
        subtitle_tracks: Subtitle tracks of the source, for subtitle sections.

    Returns:
        Non-empty tuple of planned outputs.

    Raises:
        ValidationError: If the fallback is needed but the source video has
            unknown dimensions.
    """
    source = selected.video
    planned: list[PlannedOutput] = []

    for preset in presets:
        dimensions = None
        if preset.video and source is not None:
            dimensions = derive_dimensions(source, preset.video)
            if dimensions is None:
                logger.debug(
                    "Skipping preset %s: source %sx%s below %dx%d",
                    preset.name,
                    source.width,
                    source.height,
                    preset.video.width,
                    preset.video.height,
                )
                continue
        planned.append(merge_preset(preset, selected, dimensions, subtitle_tracks))

    if planned:
        return tuple(planned)

    dimensions = None
    if source is not None and default_preset.video:
        if not source.width or not source.height:
            raise ValidationError(
                f"Cannot plan default preset {default_preset.name}: "
                "source video dimensions are unknown",
                field="video",
            )
        dimensions = (source.width, source.height)

    logger.info(
        "No preset qualifies, falling back to default preset %s",
        default_preset.name,
        extra={"dimensions": dimensions},
    )
    return (
        merge_preset(
            default_preset,
            selected,
            dimensions,
            subtitle_tracks,
            is_fallback=True,
        ),
    )
