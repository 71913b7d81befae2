"""MediaIntrospector interface for video metadata extraction."""

from pathlib import Path
from typing import Protocol

from vtp.domain.models import IntrospectionResult
from vtp.exceptions import VTPError


class MediaIntrospectionError(VTPError):
    """Raised when media introspection fails (file missing or unreadable)."""

    pass


class MediaIntrospector(Protocol):
    """Protocol for media introspection implementations.

    This protocol defines the interface for extracting metadata from
    video files. The transcoding engine uses it both to build the initial
    MediaDescriptor and to re-probe produced outputs for their duration.
    """

    def get_file_info(self, path: Path) -> IntrospectionResult:
        """Extract metadata from a video file.

        Args:
            path: Path to the video file.

        Returns:
            IntrospectionResult containing file metadata and track information.

        Raises:
            MediaIntrospectionError: If the file cannot be introspected.
        """
        ...
