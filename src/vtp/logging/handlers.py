"""JSON log lines for transcode runs.

Each record becomes one JSON object. Records logged inside a supervised job
carry a ``job`` object with the job id and source file. Job bookkeeping
passed through ``extra`` (state, output count, total frames, return code)
is folded into that object. Any other ``extra`` keys land under ``fields``.

Example::

    {"time": "2026-03-01T10:15:02.114+00:00", "level": "INFO",
     "logger": "vtp.jobs.supervisor", "message": "Transcode job 3f2a finished",
     "job": {"id": "3f2a9c1e7b6d", "file": "/media/movie.mkv", "state": "finished"}}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Keys logged via extra={...} that describe the job itself
JOB_FIELDS: tuple[str, ...] = ("state", "outputs", "total_frames", "returncode")

# Attributes every record has, plus the ones JobContextFilter sets
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "job_id", "file_path", "job_tag"}


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }

        job = self._job_entry(record, extras)
        if job:
            entry["job"] = job
        if extras:
            entry["fields"] = extras

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)

    @staticmethod
    def _job_entry(record: logging.LogRecord, extras: dict[str, Any]) -> dict[str, Any]:
        """Collect job identity and bookkeeping, removing it from ``extras``."""
        job: dict[str, Any] = {}
        job_id = getattr(record, "job_id", None)
        if job_id:
            job["id"] = job_id
            job["file"] = getattr(record, "file_path", None)
        for field in JOB_FIELDS:
            if field in extras:
                job[field] = extras.pop(field)
        return job
