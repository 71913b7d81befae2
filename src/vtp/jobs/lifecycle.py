"""Process lifecycle hooks.

The supervisor registers each running engine process with a lifecycle
object and unregisters it on every terminal transition. The default
implementation kills whatever is still registered when the interpreter
exits, so an interrupted CLI never leaves ffmpeg running.
"""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Protocol

from vtp.engine.interface import EngineProcess

logger = logging.getLogger(__name__)


class ProcessLifecycle(Protocol):
    def register(self, process: EngineProcess) -> None: ...

    def unregister(self, process: EngineProcess) -> None: ...


class ExitHookLifecycle:
    """Kills registered processes from an ``atexit`` hook."""

    def __init__(self) -> None:
        self._processes: list[EngineProcess] = []
        self._lock = threading.Lock()
        self._hook_registered = False

    def register(self, process: EngineProcess) -> None:
        with self._lock:
            self._processes.append(process)
            if not self._hook_registered:
                atexit.register(self.kill_all)
                self._hook_registered = True

    def unregister(self, process: EngineProcess) -> None:
        with self._lock:
            try:
                self._processes.remove(process)
            except ValueError:
                pass

    @property
    def active(self) -> int:
        with self._lock:
            return len(self._processes)

    def kill_all(self) -> None:
        """Kill every registered process."""
        with self._lock:
            processes = list(self._processes)
            self._processes.clear()
        for process in processes:
            try:
                process.kill()
            except OSError as e:
                logger.debug("Could not kill process at exit: %s", e)


class NullLifecycle:
    """Lifecycle that tracks nothing."""

    def register(self, process: EngineProcess) -> None:
        pass

    def unregister(self, process: EngineProcess) -> None:
        pass


_default_lifecycle: ExitHookLifecycle | None = None
_default_lock = threading.Lock()


def get_default_lifecycle() -> ExitHookLifecycle:
    """Return the process-wide exit-hook lifecycle."""
    global _default_lifecycle
    with _default_lock:
        if _default_lifecycle is None:
            _default_lifecycle = ExitHookLifecycle()
        return _default_lifecycle
