"""Job supervision, finalization and process lifecycle."""

from vtp.jobs.finalize import run_finalization
from vtp.jobs.lifecycle import (
    ExitHookLifecycle,
    NullLifecycle,
    ProcessLifecycle,
    get_default_lifecycle,
)
from vtp.jobs.supervisor import JobHandle, JobSupervisor
from vtp.jobs.types import (
    OutputResult,
    ProgressEvent,
    SubtitleResult,
    ThumbnailSheet,
    TranscodeResult,
)

__all__ = [
    "ExitHookLifecycle",
    "JobHandle",
    "JobSupervisor",
    "NullLifecycle",
    "OutputResult",
    "ProcessLifecycle",
    "ProgressEvent",
    "SubtitleResult",
    "ThumbnailSheet",
    "TranscodeResult",
    "get_default_lifecycle",
    "run_finalization",
]
