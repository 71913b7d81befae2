"""Filesystem helpers for produced outputs and working directories."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

_FRAME_NUMBER = re.compile(r"\.([0-9]+)\.?[a-zA-Z]*$")


def stat_file_size(path: Path) -> int | None:
    """Return the size of ``path`` in bytes, or None if it cannot be read."""
    try:
        return path.stat().st_size
    except OSError as e:
        logger.debug("Could not stat %s: %s", path, e)
        return None


def remove_directory(path: Path) -> None:
    """Remove a working directory tree, logging instead of raising."""
    try:
        shutil.rmtree(path)
        logger.debug("Removed working directory: %s", path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove working directory %s: %s", path, e)


def frame_number(path: Path) -> int:
    """Extract the sequence number from a still such as ``snap.012.jpg``.

    Files without a number sort last.
    """
    match = _FRAME_NUMBER.search(path.name)
    if match is None:
        return 2**31
    return int(match.group(1))


def list_frames(directory: Path) -> list[Path]:
    """List numbered still frames in ``directory`` in sequence order."""
    return sorted(
        (p for p in directory.iterdir() if p.is_file()),
        key=lambda p: (frame_number(p), p.name),
    )
