"""Track catalog: bucket probed streams by media type.

Streams other than audio, video and subtitle (attachments, data) are
dropped. Bucket order is probe order.
"""

import logging
from collections.abc import Iterable

from vtp.domain.models import IntrospectionResult, MediaDescriptor, TrackInfo

logger = logging.getLogger(__name__)


def classify_tracks(
    tracks: Iterable[TrackInfo],
) -> tuple[tuple[TrackInfo, ...], tuple[TrackInfo, ...], tuple[TrackInfo, ...]]:
    """Split tracks into (video, audio, subtitle) buckets, keeping order."""
    video: list[TrackInfo] = []
    audio: list[TrackInfo] = []
    subtitle: list[TrackInfo] = []
    buckets = {"video": video, "audio": audio, "subtitle": subtitle}

    for track in tracks:
        bucket = buckets.get(track.track_type)
        if bucket is None:
            logger.debug(
                "Ignoring %s stream #%d (%s)",
                track.track_type,
                track.index,
                track.codec,
            )
            continue
        bucket.append(track)

    return tuple(video), tuple(audio), tuple(subtitle)


def build_descriptor(result: IntrospectionResult) -> MediaDescriptor:
    """Build a MediaDescriptor from an introspection result.

    Args:
        result: Probe output for one media file.

    Returns:
        Descriptor with tracks bucketed by type and no selection.
    """
    video, audio, subtitle = classify_tracks(result.tracks)
    logger.debug(
        "Catalogued %s: %d video, %d audio, %d subtitle",
        result.file_path,
        len(video),
        len(audio),
        len(subtitle),
    )
    return MediaDescriptor(
        path=result.file_path,
        video_tracks=video,
        audio_tracks=audio,
        subtitle_tracks=subtitle,
        container_format=result.container_format,
        duration_seconds=result.duration_seconds,
    )
