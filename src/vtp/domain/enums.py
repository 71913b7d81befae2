"""Domain enums for Video Transcode Planner."""

from enum import Enum


class TrackType(str, Enum):
    """Media type of a probed stream, as reported by ffprobe codec_type."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    ATTACHMENT = "attachment"
    OTHER = "other"


class JobState(Enum):
    """Lifecycle state of a supervised transcode job.

    CREATED -> RUNNING -> one of FINISHED, FAILED, KILLED. Terminal states
    are never left.
    """

    CREATED = "created"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    KILLED = "killed"

    @property
    def is_terminal(self) -> bool:
        """True for FINISHED, FAILED and KILLED."""
        return self in (JobState.FINISHED, JobState.FAILED, JobState.KILLED)
