"""Finalization tasks run after the engine reports success.

Each task is independent and runs on the supervisor's finalization pool.
Failures inside a task are logged and leave the affected field empty;
they never fail the job.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from vtp.compositor.interface import CompositeLayout, Compositor, CompositorError
from vtp.core.file_utils import list_frames, remove_directory, stat_file_size
from vtp.engine.interface import TranscodingEngine
from vtp.exceptions import VTPError
from vtp.executor.types import (
    AVOutputSpec,
    JobPlan,
    SubtitleOutputSpec,
    ThumbnailBranch,
)
from vtp.jobs.types import OutputResult, SubtitleResult, ThumbnailSheet

logger = logging.getLogger(__name__)


def finalize_av_output(spec: AVOutputSpec, engine: TranscodingEngine) -> OutputResult:
    """Stat an AV output, re-probing it when its duration is unknown."""
    duration = spec.duration
    if duration is None:
        try:
            probed = engine.probe(spec.path)
        except (VTPError, OSError) as e:
            logger.warning("Could not probe %s for its duration: %s", spec.path, e)
        else:
            video = probed.primary_video_track
            if video is not None and video.duration_seconds is not None:
                duration = video.duration_seconds
            else:
                duration = probed.duration_seconds

    return OutputResult(
        name=spec.name,
        file=spec.path,
        duration=duration,
        resolution=spec.resolution,
        size=stat_file_size(spec.path),
    )


def finalize_subtitle(spec: SubtitleOutputSpec) -> SubtitleResult:
    """Attach the file size to a standalone subtitle's metadata."""
    return SubtitleResult(
        label=spec.label,
        file=spec.path,
        language=spec.language,
        language_639_1=spec.language_639_1,
        language_name=spec.language_name,
        is_default=spec.is_default,
        is_forced=spec.is_forced,
        size=stat_file_size(spec.path),
    )


def finalize_thumbnails(
    branch: ThumbnailBranch, compositor: Compositor
) -> ThumbnailSheet | None:
    """Compose captured stills into a sprite sheet.

    The still-frame directory is removed whatever the outcome.
    """
    try:
        frames = list_frames(branch.directory)
        if not frames:
            raise CompositorError(f"No thumbnails found in {branch.directory}")
        tile = compositor.compose(
            frames, CompositeLayout(columns=branch.columns), branch.sheet_path
        )
        return ThumbnailSheet(
            file=branch.sheet_path,
            columns=branch.columns,
            frame_count=len(frames),
            frame_size=(tile.width, tile.height),
            delay=branch.delay,
            size=stat_file_size(branch.sheet_path),
        )
    except (VTPError, OSError) as e:
        logger.warning("Could not compose thumbnails for %s: %s", branch.sheet_path, e)
        return None
    finally:
        remove_directory(branch.directory)


def run_finalization(
    plan: JobPlan,
    engine: TranscodingEngine,
    compositor: Compositor,
    max_workers: int = 4,
    thread_name_prefix: str = "vtp-finalize",
) -> tuple[tuple[OutputResult, ...], tuple[SubtitleResult, ...], ThumbnailSheet | None]:
    """Run every finalization task concurrently and join them.

    Returns:
        (outputs, subtitles, thumbnails) in plan order.
    """
    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix=thread_name_prefix
    ) as executor:
        av_futures = [
            executor.submit(finalize_av_output, spec, engine)
            for spec in plan.av_outputs
        ]
        sub_futures = [
            executor.submit(finalize_subtitle, spec) for spec in plan.subtitle_outputs
        ]
        thumb_future = None
        if plan.thumbnails is not None:
            thumb_future = executor.submit(
                finalize_thumbnails, plan.thumbnails, compositor
            )

        outputs = tuple(f.result() for f in av_futures)
        subtitles = tuple(f.result() for f in sub_futures)
        thumbnails = thumb_future.result() if thumb_future is not None else None

    return outputs, subtitles, thumbnails
