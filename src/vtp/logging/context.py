"""Job context for structured logging.

Provides context propagation for supervisor and finalization threads using
contextvars, enabling automatic injection of job_id and file_path into log
records.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


@contextmanager
def job_context(
    job_id: str, file_path: Path | str | None = None
) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Sets job context on entry, restores the previous one on exit.

    Example:
        with job_context(handle.job_id, plan.input_path):
            logger.info("Finalizing")  # Automatically includes context
    """
    job_token = _job_id.set(job_id)
    path_token = _file_path.set(str(file_path) if file_path is not None else None)
    try:
        yield
    finally:
        _job_id.reset(job_token)
        _file_path.reset(path_token)


def get_job_context() -> tuple[str | None, str | None]:
    """Return (job_id, file_path) of the current context."""
    return _job_id.get(), _file_path.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and file_path attributes, plus a compact job_tag such as
    ``[3f2a9c1e] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, file_path = get_job_context()

        record.job_id = job_id
        record.file_path = file_path
        record.job_tag = f"[{job_id[:8]}] " if job_id else ""

        return True  # Never filter out records
