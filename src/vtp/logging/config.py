"""Root logger setup for the vtp command line.

``configure_logging`` applies the ``[logging]`` config section, with the
CLI's ``--log-level``, ``--log-file`` and ``--log-json`` options layered on
top.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from vtp.logging.context import JobContextFilter
from vtp.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from vtp.config.models import LoggingConfig

# "[3f2a9c1e] " prefix inside a supervised job
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(job_tag)s%(name)s: %(message)s"


def apply_overrides(
    config: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    json_format: bool = False,
) -> LoggingConfig:
    """Return ``config`` with the CLI options that were given applied.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    changes: dict[str, object] = {}
    if level is not None:
        changes["level"] = level
    if file is not None:
        changes["file"] = file
    if json_format:
        changes["format"] = "json"
    return dataclasses.replace(config, **changes) if changes else config


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Could not open log file {config.file}: {e}\n")
        return None


def configure_logging(
    config: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    json_format: bool = False,
) -> LoggingConfig:
    """Replace the root logger's handlers according to ``config``.

    Logs go to a rotating file when one is configured and can be opened,
    and to stderr otherwise or when ``include_stderr`` is set.

    Args:
        config: The ``[logging]`` section.
        level: ``--log-level`` override.
        file: ``--log-file`` override.
        json_format: ``--log-json`` was given.

    Returns:
        The effective logging configuration.
    """
    config = apply_overrides(config, level=level, file=file, json_format=json_format)
    log_level = logging.getLevelName(config.level.upper())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _open_log_file(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = _formatter(config)
    context_filter = JobContextFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
    return config
