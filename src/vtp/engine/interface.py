"""Transcoding engine interface.

The supervisor only talks to these protocols. FFmpegEngine is the
production implementation; tests substitute fakes.
"""

import signal
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vtp.domain.models import IntrospectionResult
from vtp.engine.progress import FFmpegProgress
from vtp.executor.types import JobPlan

ProgressCallback = Callable[[FFmpegProgress], None]


@dataclass(frozen=True)
class EngineOutcome:
    """How an engine process ended.

    Attributes:
        returncode: Exit status (negative for a signal on POSIX).
        error_message: Engine-level error description, if any.
        stdout: Captured standard output.
        stderr: Captured standard error (tail).
    """

    returncode: int
    error_message: str | None = None
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0 and self.error_message is None


class EngineProcess(Protocol):
    """A running engine process."""

    def kill(self, sig: int = signal.SIGKILL) -> None:
        """Send ``sig`` to the process. No-op once it has exited."""
        ...

    def wait(self) -> EngineOutcome:
        """Block until the process exits and its output is drained."""
        ...


class TranscodingEngine(Protocol):
    """Probes media and runs job plans."""

    def probe(self, path: Path) -> IntrospectionResult:
        """Probe a media file.

        Raises:
            MediaIntrospectionError: If the file is missing or unreadable.
        """
        ...

    def run(
        self, plan: JobPlan, on_progress: ProgressCallback | None = None
    ) -> EngineProcess:
        """Start the job. Progress callbacks arrive on an engine thread.

        Raises:
            ProcessError: If the process cannot be started.
        """
        ...
