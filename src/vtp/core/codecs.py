"""Codec knowledge used by planning and job construction.

This module is the single source of truth for which codec names are
bitmap (image-based) subtitles. Image subtitles cannot share a container
with text streams, so they are burnt onto the video instead of muxed.
"""

from __future__ import annotations

# Bitmap subtitle codecs as reported by ffprobe codec_name, plus common aliases
BITMAP_SUBTITLE_CODECS: frozenset[str] = frozenset(
    {
        "hdmv_pgs_subtitle",
        "pgssub",
        "pgs",
        "dvd_subtitle",
        "dvdsub",
        "vobsub",
        "dvb_subtitle",
        "xsub",
    }
)


def normalize_codec(codec: str | None) -> str:
    """Normalize a codec name for comparison.

    Args:
        codec: Codec name (may be None).

    Returns:
        Lower-cased, stripped codec name, or empty string for None.
    """
    if not codec:
        return ""
    return codec.strip().casefold()


def is_bitmap_subtitle(codec: str | None) -> bool:
    """Check if a subtitle codec is bitmap-based (cannot be muxed as text).

    Args:
        codec: Subtitle codec name.

    Returns:
        True if the codec is a bitmap-based subtitle format.
    """
    return normalize_codec(codec) in BITMAP_SUBTITLE_CODECS


def to_kilobits(bits: int | float) -> str:
    """Format a bit rate the way ffmpeg options expect it.

    Uses 1000 bits per kilobit, matching how preset bitrates are parsed.

    Examples:
        >>> to_kilobits(128000)
        '128k'
    """
    return f"{int(bits // 1000)}k"
