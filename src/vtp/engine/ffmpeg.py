"""FFmpeg-backed transcoding engine.

Runs one ffmpeg process per job. stderr is read on a background thread that
parses stats lines and forwards them to the progress callback; stdout is
drained on a second thread so neither pipe can fill up and block ffmpeg.
"""

from __future__ import annotations

import collections
import logging
import signal
import subprocess  # nosec B404 - subprocess is required for ffmpeg execution
import threading
from pathlib import Path

from vtp.domain.models import IntrospectionResult
from vtp.engine.interface import EngineOutcome, ProgressCallback
from vtp.engine.progress import parse_stderr_progress
from vtp.exceptions import ProcessError
from vtp.executor.command import render_ffmpeg_command
from vtp.executor.types import JobPlan
from vtp.introspector.ffprobe import FFprobeIntrospector
from vtp.introspector.interface import MediaIntrospector

logger = logging.getLogger(__name__)

# Lines of stderr kept for error reporting
STDERR_TAIL_LINES = 200
# Seconds to wait for reader threads after the process exits
STDERR_DRAIN_TIMEOUT = 5.0


class FFmpegProcess:
    """Handle to a running ffmpeg process."""

    def __init__(
        self,
        process: subprocess.Popen,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._process = process
        self._on_progress = on_progress
        self._stderr_tail: collections.deque[str] = collections.deque(
            maxlen=STDERR_TAIL_LINES
        )
        self._stdout: list[str] = []
        self._lock = threading.Lock()

        self._stderr_thread = threading.Thread(
            target=self._read_stderr, name=f"ffmpeg-stderr-{process.pid}", daemon=True
        )
        self._stdout_thread = threading.Thread(
            target=self._read_stdout, name=f"ffmpeg-stdout-{process.pid}", daemon=True
        )
        self._stderr_thread.start()
        self._stdout_thread.start()

    @property
    def pid(self) -> int:
        return self._process.pid

    def _read_stderr(self) -> None:
        """Read stderr lines, keep a tail and relay progress."""
        try:
            assert self._process.stderr is not None
            for line in self._process.stderr:
                with self._lock:
                    self._stderr_tail.append(line)
                progress = parse_stderr_progress(line)
                if progress is None or self._on_progress is None:
                    continue
                try:
                    self._on_progress(progress)
                except Exception as e:
                    logger.warning("Progress callback error: %s", e)
        except (ValueError, OSError) as e:
            # Pipe closed or process terminated
            logger.debug("Stderr reader stopped: %s", e)

    def _read_stdout(self) -> None:
        try:
            assert self._process.stdout is not None
            for line in self._process.stdout:
                with self._lock:
                    self._stdout.append(line)
        except (ValueError, OSError) as e:
            logger.debug("Stdout reader stopped: %s", e)

    def kill(self, sig: int = signal.SIGKILL) -> None:
        """Send ``sig`` to ffmpeg if it is still running."""
        if self._process.poll() is not None:
            return
        try:
            self._process.send_signal(sig)
            logger.debug("Sent signal %d to ffmpeg pid %d", sig, self._process.pid)
        except ProcessLookupError:
            pass

    def wait(self) -> EngineOutcome:
        """Wait for ffmpeg to exit and its output to be drained."""
        returncode = self._process.wait()
        self._stderr_thread.join(timeout=STDERR_DRAIN_TIMEOUT)
        self._stdout_thread.join(timeout=STDERR_DRAIN_TIMEOUT)
        if self._stderr_thread.is_alive() or self._stdout_thread.is_alive():
            logger.warning("ffmpeg output reader did not finish after exit")

        with self._lock:
            stderr = "".join(self._stderr_tail)
            stdout = "".join(self._stdout)

        error_message = None
        if returncode != 0:
            error_message = f"ffmpeg exited with code {returncode}"
        return EngineOutcome(
            returncode=returncode,
            error_message=error_message,
            stdout=stdout,
            stderr=stderr,
        )


class FFmpegEngine:
    """TranscodingEngine implementation using ffmpeg and ffprobe."""

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        introspector: MediaIntrospector | None = None,
        preview_seconds: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ffmpeg_path: ffmpeg executable. Defaults to the configured path.
            introspector: Prober for source and produced files. Defaults to
                FFprobeIntrospector with the configured ffprobe.
            preview_seconds: Limit every output to this many seconds.

        Raises:
            ProcessError: If ffmpeg is not available.
        """
        if ffmpeg_path is None:
            from vtp.config.loader import get_tool_path

            ffmpeg_path = get_tool_path("ffmpeg")
        if ffmpeg_path is None:
            raise ProcessError(
                "ffmpeg is not installed or not in PATH. "
                "Configure a custom path via VTP_FFMPEG_PATH "
                "environment variable or ~/.vtp/config.toml"
            )
        self._ffmpeg_path = ffmpeg_path
        self._introspector = introspector
        self._preview_seconds = preview_seconds

    def probe(self, path: Path) -> IntrospectionResult:
        if self._introspector is None:
            self._introspector = FFprobeIntrospector()
        return self._introspector.get_file_info(path)

    def command_for(self, plan: JobPlan) -> list[str]:
        """Return the ffmpeg command for ``plan``."""
        return render_ffmpeg_command(
            plan, self._ffmpeg_path, preview_seconds=self._preview_seconds
        )

    def run(
        self, plan: JobPlan, on_progress: ProgressCallback | None = None
    ) -> FFmpegProcess:
        """Start ffmpeg for ``plan``.

        Raises:
            ProcessError: If ffmpeg cannot be started.
        """
        cmd = self.command_for(plan)
        logger.info(
            "Spawning ffmpeg: %s",
            " ".join(cmd),
            extra={"input": str(plan.input_path), "outputs": plan.output_count},
        )
        try:
            process = subprocess.Popen(  # nosec B603 - command built from plan
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ProcessError(f"Could not start ffmpeg: {e}") from e
        return FFmpegProcess(process, on_progress)
