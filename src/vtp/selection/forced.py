"""Forced-subtitle detection.

A forced subtitle track only covers dialogue that needs translation (signs,
foreign-language scenes). Files rarely flag these reliably, so detection is
a heuristic: any one of the checks below marks a track as forced.
"""

import re
from dataclasses import dataclass, field
from re import Pattern

from vtp.domain.models import TrackInfo

DEFAULT_MAX_FRAME_COUNT = 50
DEFAULT_TITLE_PATTERN = "force"


@dataclass(frozen=True)
class ForcedSubtitleHeuristic:
    """Decides whether a subtitle track is a forced track.

    Attributes:
        max_frame_count: Tracks with at most this many cues count as forced.
            None disables the check.
        title_pattern: Titles matching this pattern count as forced.
            None disables the check.
        use_disposition: Honor the forced disposition flag.
    """

    max_frame_count: int | None = DEFAULT_MAX_FRAME_COUNT
    title_pattern: Pattern[str] | None = field(
        default_factory=lambda: re.compile(DEFAULT_TITLE_PATTERN, re.IGNORECASE)
    )
    use_disposition: bool = True

    @classmethod
    def from_settings(
        cls,
        max_frame_count: int | None = DEFAULT_MAX_FRAME_COUNT,
        title_pattern: str | None = DEFAULT_TITLE_PATTERN,
    ) -> "ForcedSubtitleHeuristic":
        """Build a heuristic from plain configuration values.

        Raises:
            ValueError: If title_pattern is not a valid regex.
        """
        compiled = None
        if title_pattern:
            try:
                compiled = re.compile(title_pattern, re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"Invalid forced title pattern: {e}") from e
        return cls(max_frame_count=max_frame_count, title_pattern=compiled)

    def is_forced(self, track: TrackInfo) -> bool:
        """Return True if the track looks like a forced subtitle track."""
        if self.use_disposition and track.is_forced:
            return True
        if (
            self.max_frame_count is not None
            and track.frame_count is not None
            and track.frame_count <= self.max_frame_count
        ):
            return True
        if self.title_pattern is not None and track.title:
            return self.title_pattern.search(track.title) is not None
        return False


DEFAULT_HEURISTIC = ForcedSubtitleHeuristic()
