"""Track selection by language preference.

Picks the audio track, the optional subtitle track and the video track
that every output features by default. Ties always go to the first track
in probe order.
"""

import logging
import re
from dataclasses import dataclass
from re import Pattern

from vtp.domain.models import MediaDescriptor, SelectedTracks, TrackInfo
from vtp.exceptions import ValidationError
from vtp.selection.forced import DEFAULT_HEURISTIC, ForcedSubtitleHeuristic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioSubtitleSelection:
    """Result of audio/subtitle selection."""

    audio: TrackInfo
    subtitle: TrackInfo | None = None


def compile_language_pattern(pattern: str | Pattern[str]) -> Pattern[str]:
    """Compile a preferred-language pattern.

    Raises:
        ValidationError: If the pattern is not a valid regex.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            f"Invalid preferred language pattern {pattern!r}: {e}",
            field="preferred_language",
        ) from e


def matches_language(track: TrackInfo, pattern: Pattern[str]) -> bool:
    """Check the language tag, then the title tag, against ``pattern``.

    Tracks with neither tag never match.
    """
    if track.language and pattern.search(track.language):
        return True
    return bool(track.title and pattern.search(track.title))


def select_audio_and_subtitle(
    descriptor: MediaDescriptor,
    preferred_language: str | Pattern[str],
    heuristic: ForcedSubtitleHeuristic = DEFAULT_HEURISTIC,
) -> AudioSubtitleSelection:
    """Select the default audio track and the subtitle track to feature.

    When an audio track in the preferred language exists, only a forced
    subtitle in that language is selected (full subtitles are redundant
    next to audio the viewer understands). Otherwise a full subtitle in
    the preferred language is preferred, falling back to the first
    candidate when every candidate is forced.

    Args:
        descriptor: Catalogued media.
        preferred_language: Regex searched in language and title tags.
        heuristic: Forced-subtitle detector.

    Returns:
        AudioSubtitleSelection with audio always set.

    Raises:
        ValidationError: If the media has no audio track or the pattern is
            invalid.
    """
    if not descriptor.audio_tracks:
        raise ValidationError(
            f"No audio tracks in {descriptor.path}", field="audio_tracks"
        )

    pattern = compile_language_pattern(preferred_language)
    preferred_audio = [t for t in descriptor.audio_tracks if matches_language(t, pattern)]
    preferred_subtitles = [
        t for t in descriptor.subtitle_tracks if matches_language(t, pattern)
    ]

    audio: TrackInfo | None = None
    subtitle: TrackInfo | None = None

    if preferred_audio:
        audio = preferred_audio[0]
        subtitle = next(
            (t for t in preferred_subtitles if heuristic.is_forced(t)), None
        )
    elif preferred_subtitles:
        subtitle = next(
            (t for t in preferred_subtitles if not heuristic.is_forced(t)),
            preferred_subtitles[0],
        )

    if audio is None:
        audio = descriptor.audio_tracks[0]

    logger.debug(
        "Selected audio #%d, subtitle %s for %s",
        audio.index,
        f"#{subtitle.index}" if subtitle else "none",
        descriptor.path,
        extra={"preferred_language": pattern.pattern},
    )
    return AudioSubtitleSelection(audio=audio, subtitle=subtitle)


def select_video(descriptor: MediaDescriptor) -> TrackInfo:
    """Select the first video track.

    Raises:
        ValidationError: If the media has no video track.
    """
    if not descriptor.video_tracks:
        raise ValidationError(
            f"No video tracks in {descriptor.path}", field="video_tracks"
        )
    return descriptor.video_tracks[0]


def select_tracks(
    descriptor: MediaDescriptor,
    preferred_language: str | Pattern[str],
    heuristic: ForcedSubtitleHeuristic = DEFAULT_HEURISTIC,
    require_video: bool = True,
) -> MediaDescriptor:
    """Run audio, subtitle and video selection.

    Args:
        descriptor: Catalogued media.
        preferred_language: Regex searched in language and title tags.
        heuristic: Forced-subtitle detector.
        require_video: Fail when the media has no video track. When False,
            a missing video track leaves ``selected.video`` unset.

    Returns:
        A new descriptor carrying the selection.

    Raises:
        ValidationError: If a required track is missing.
    """
    chosen = select_audio_and_subtitle(descriptor, preferred_language, heuristic)
    video: TrackInfo | None = None
    if require_video or descriptor.video_tracks:
        video = select_video(descriptor)
    return descriptor.with_selection(
        SelectedTracks(audio=chosen.audio, video=video, subtitle=chosen.subtitle)
    )
