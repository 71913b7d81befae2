"""Job supervision: run a job plan, relay progress, handle kill and finalize.

Each job moves CREATED -> RUNNING -> FINISHED | FAILED | KILLED. The
terminal outcome is delivered through a ``concurrent.futures.Future``;
progress updates go through a queue that closes when the job ends.

Threads involved per job:

- the engine's reader threads, which deliver progress;
- one monitor thread, which waits for the engine to exit and runs the
  finalization fan-out on a small thread pool.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from collections.abc import Callable, Iterator
from concurrent.futures import Future
from typing import Any

from vtp.compositor.interface import Compositor
from vtp.domain.enums import JobState
from vtp.engine.interface import (
    EngineOutcome,
    EngineProcess,
    TranscodingEngine,
)
from vtp.engine.progress import FFmpegProgress
from vtp.exceptions import CancellationError, ProcessError, VTPError
from vtp.executor.types import JobPlan
from vtp.jobs.finalize import run_finalization
from vtp.jobs.lifecycle import ProcessLifecycle, get_default_lifecycle
from vtp.jobs.types import ProgressEvent, TranscodeResult
from vtp.logging.context import job_context

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ProgressEvent], None]
StartListener = Callable[["JobHandle"], None]

_END = object()


def compute_eta(total_frames: int, frames: int, fps: float | None) -> float:
    """Seconds left at the current speed; fps below 1 counts as 1."""
    return max(total_frames - frames, 0) / max(fps or 0.0, 1.0)


def failure_diagnostic(outcome: EngineOutcome) -> str:
    """Pick the most useful text describing an engine failure.

    Prefers captured stderr, then the engine's error message, then stdout.
    """
    for text in (outcome.stderr, outcome.error_message, outcome.stdout):
        if text and text.strip():
            return text.strip()
    return f"Engine exited with code {outcome.returncode}"


class JobHandle:
    """Caller-side handle of one supervised job.

    Attributes:
        job_id: Unique job identifier.
        plan: The job plan being run.
        transit_data: Opaque caller data carried into the result.
        future: Resolves to a TranscodeResult, or raises CancellationError
            or ProcessError.
    """

    def __init__(self, plan: JobPlan, transit_data: Any = None) -> None:
        self.job_id = uuid.uuid4().hex
        self.plan = plan
        self.transit_data = transit_data
        self.future: Future[TranscodeResult] = Future()

        self._state = JobState.CREATED
        self._killed = False
        self._process: EngineProcess | None = None
        self._lock = threading.Lock()
        self._events: queue.Queue[Any] = queue.Queue()
        self._on_progress: ProgressListener | None = None

    def __repr__(self) -> str:
        return f"JobHandle(job_id={self.job_id!r}, state={self.state.value!r})"

    @property
    def state(self) -> JobState:
        with self._lock:
            return self._state

    @property
    def killed(self) -> bool:
        with self._lock:
            return self._killed

    def kill(self) -> None:
        """Kill the job. Calling it again, or after the job ended, is a no-op."""
        with self._lock:
            if self._killed or self._state.is_terminal:
                return
            self._killed = True
            process = self._process
        logger.info("Killing transcode job %s", self.job_id)
        if process is not None:
            process.kill()

    def result(self, timeout: float | None = None) -> TranscodeResult:
        """Block for the terminal result.

        Raises:
            CancellationError: If the job was killed.
            ProcessError: If the engine failed.
            TimeoutError: If ``timeout`` elapses first.
        """
        return self.future.result(timeout)

    def progress_events(self) -> Iterator[ProgressEvent]:
        """Yield progress events until the job reaches a terminal state."""
        while True:
            item = self._events.get()
            if item is _END:
                # Leave the marker for any other consumer
                self._events.put(_END)
                return
            yield item

    # Supervisor side

    def _transition(self, state: JobState) -> bool:
        with self._lock:
            if self._state.is_terminal:
                return False
            self._state = state
            return True

    def _attach(self, process: EngineProcess) -> bool:
        """Record the running process. Returns True if already killed."""
        with self._lock:
            self._process = process
            return self._killed

    def _relay(self, progress: FFmpegProgress) -> None:
        total = self.plan.total_frames
        frames = progress.frame or 0
        fps = progress.fps or 0.0
        event = ProgressEvent(
            job_id=self.job_id,
            frames=frames,
            current_fps=fps,
            total_frames=total,
            eta_seconds=compute_eta(total, frames, fps),
            percent=min(100.0, frames * 100.0 / total) if total else None,
            raw=progress.raw,
        )
        with self._lock:
            # Events never follow the end marker
            if self._state.is_terminal:
                return
            self._events.put(event)
        if self._on_progress is not None:
            try:
                self._on_progress(event)
            except Exception as e:
                logger.warning("Progress listener error: %s", e)

    def _finish(
        self,
        state: JobState,
        result: TranscodeResult | None = None,
        error: BaseException | None = None,
    ) -> None:
        with self._lock:
            if self._state.is_terminal:
                return
            self._state = state
            self._events.put(_END)
        if error is not None:
            self.future.set_exception(error)
        else:
            self.future.set_result(result)
        logger.info(
            "Transcode job %s %s",
            self.job_id,
            state.value,
            extra={"state": state.value},
        )


class JobSupervisor:
    """Runs job plans on a transcoding engine.

    Args:
        engine: Engine used to run plans and re-probe outputs.
        compositor: Compositor for thumbnail sprite sheets.
        lifecycle: Registry notified of running processes. Defaults to
            the process-wide exit hook.
        finalize_workers: Size of each job's finalization pool.
    """

    def __init__(
        self,
        engine: TranscodingEngine,
        compositor: Compositor,
        lifecycle: ProcessLifecycle | None = None,
        finalize_workers: int = 4,
    ) -> None:
        self._engine = engine
        self._compositor = compositor
        self._lifecycle = lifecycle if lifecycle is not None else get_default_lifecycle()
        self._finalize_workers = finalize_workers

    def start(
        self,
        plan: JobPlan,
        on_progress: ProgressListener | None = None,
        on_start: StartListener | None = None,
        transit_data: Any = None,
    ) -> JobHandle:
        """Start running ``plan``.

        The job is RUNNING when this returns, unless the engine could not
        be started, in which case it is already FAILED.

        Args:
            plan: Job plan to run.
            on_progress: Called with each ProgressEvent on an engine thread.
            on_start: Called once with the handle after the job is RUNNING.
            transit_data: Opaque data carried into the result.

        Returns:
            Handle of the new job.
        """
        handle = JobHandle(plan, transit_data)
        handle._on_progress = on_progress

        with job_context(handle.job_id, plan.input_path):
            handle._transition(JobState.RUNNING)
            logger.info(
                "Starting transcode job for %s",
                plan.input_path,
                extra={"outputs": plan.output_count, "total_frames": plan.total_frames},
            )
            if on_start is not None:
                try:
                    on_start(handle)
                except Exception as e:
                    logger.warning("Start listener error: %s", e)

            try:
                self._prepare_directories(plan)
                process = self._engine.run(plan, handle._relay)
            except VTPError as e:
                self._fail_start(handle, e)
                return handle
            except OSError as e:
                error = ProcessError(f"Could not start transcode job: {e}")
                error.__cause__ = e
                self._fail_start(handle, error)
                return handle

            self._lifecycle.register(process)
            if handle._attach(process):
                # kill() arrived before the process existed
                process.kill()

        monitor = threading.Thread(
            target=self._monitor,
            args=(handle, process),
            name=f"vtp-job-{handle.job_id[:8]}",
            daemon=True,
        )
        monitor.start()
        return handle

    @staticmethod
    def _fail_start(handle: JobHandle, error: VTPError) -> None:
        if handle.killed:
            handle._finish(JobState.KILLED, error=CancellationError(handle.job_id))
        else:
            handle._finish(JobState.FAILED, error=error)

    @staticmethod
    def _prepare_directories(plan: JobPlan) -> None:
        plan.output_dir.mkdir(parents=True, exist_ok=True)
        if plan.thumbnails is not None:
            plan.thumbnails.directory.mkdir(parents=True, exist_ok=True)

    def _monitor(self, handle: JobHandle, process: EngineProcess) -> None:
        with job_context(handle.job_id, handle.plan.input_path):
            try:
                self._complete(handle, process)
            except Exception as e:
                logger.exception("Transcode job %s crashed", handle.job_id)
                state = JobState.KILLED if handle.killed else JobState.FAILED
                error = CancellationError(handle.job_id) if handle.killed else e
                handle._finish(state, error=error)

    def _complete(self, handle: JobHandle, process: EngineProcess) -> None:
        try:
            outcome = process.wait()
        finally:
            self._lifecycle.unregister(process)

        if handle.killed:
            handle._finish(JobState.KILLED, error=CancellationError(handle.job_id))
            return

        if not outcome.success:
            diagnostic = failure_diagnostic(outcome)
            logger.error(
                "Transcode job %s failed: %s",
                handle.job_id,
                diagnostic.splitlines()[-1] if diagnostic else "",
                extra={"returncode": outcome.returncode},
            )
            handle._finish(
                JobState.FAILED,
                error=ProcessError(
                    diagnostic,
                    returncode=outcome.returncode,
                    stderr=outcome.stderr,
                    stdout=outcome.stdout,
                ),
            )
            return

        outputs, subtitles, thumbnails = run_finalization(
            handle.plan,
            self._engine,
            self._compositor,
            max_workers=self._finalize_workers,
            thread_name_prefix=f"vtp-finalize-{handle.job_id[:8]}",
        )

        if handle.killed:
            handle._finish(JobState.KILLED, error=CancellationError(handle.job_id))
            return

        handle._finish(
            JobState.FINISHED,
            result=TranscodeResult(
                job_id=handle.job_id,
                input_path=handle.plan.input_path,
                outputs=outputs,
                subtitles=subtitles,
                thumbnails=thumbnails,
                transit_data=handle.transit_data,
            ),
        )
