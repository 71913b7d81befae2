"""Logging setup and job-scoped log context."""

from vtp.logging.config import apply_overrides, configure_logging
from vtp.logging.context import JobContextFilter, get_job_context, job_context
from vtp.logging.handlers import JSONFormatter

__all__ = [
    "apply_overrides",
    "configure_logging",
    "JobContextFilter",
    "JSONFormatter",
    "get_job_context",
    "job_context",
]
