"""Job plan construction and ffmpeg command rendering."""

from vtp.executor.builder import build_job_plan
from vtp.executor.command import render_ffmpeg_command
from vtp.executor.types import (
    AVOutputSpec,
    JobPlan,
    SubtitleOutputSpec,
    ThumbnailBranch,
)

__all__ = [
    "build_job_plan",
    "render_ffmpeg_command",
    "AVOutputSpec",
    "JobPlan",
    "SubtitleOutputSpec",
    "ThumbnailBranch",
]
