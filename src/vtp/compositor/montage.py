"""ImageMagick ``montage`` compositor."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ImageMagick
from collections.abc import Sequence
from pathlib import Path

from vtp.compositor.interface import CompositeLayout, CompositorError, ImageResult
from vtp.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)


class MontageCompositor:
    """Compositor implementation using ImageMagick montage and identify."""

    def __init__(
        self,
        montage_path: Path | None = None,
        identify_path: Path | None = None,
        timeout: int = 300,
    ) -> None:
        if montage_path is None or identify_path is None:
            from vtp.config.loader import get_tool_path

            montage_path = montage_path or get_tool_path("montage")
            identify_path = identify_path or get_tool_path("identify")
        self._montage_path = montage_path
        self._identify_path = identify_path
        self._timeout = timeout

    def _run(self, args: list[str | Path], tool: str) -> str:
        try:
            stdout, stderr, returncode = run_command(args, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            raise CompositorError(f"{tool} timed out after {e.timeout}s") from e
        except OSError as e:
            raise CompositorError(f"Could not run {tool}: {e}") from e
        if returncode != 0:
            raise CompositorError(
                f"{tool} failed with code {returncode}: "
                f"{stderr.strip() or stdout.strip()}"
            )
        return stdout

    def identify(self, path: Path) -> ImageResult:
        """Read the pixel size of an image.

        Raises:
            CompositorError: If identify fails or prints something unexpected.
        """
        if self._identify_path is None:
            raise CompositorError("identify is not installed or not in PATH")
        output = self._run(
            [self._identify_path, "-format", "%w %h", f"{path}[0]"], "identify"
        )
        try:
            width, height = (int(v) for v in output.split()[:2])
        except ValueError as e:
            raise CompositorError(
                f"Unexpected identify output for {path}: {output!r}"
            ) from e
        return ImageResult(width=width, height=height)

    def compose(
        self, files: Sequence[Path], layout: CompositeLayout, output_path: Path
    ) -> ImageResult:
        """Tile ``files`` into ``output_path`` and return the tile size."""
        if not files:
            raise CompositorError("No thumbnails found")
        if self._montage_path is None:
            raise CompositorError("montage is not installed or not in PATH")

        frame_size = self.identify(files[0])
        args: list[str | Path] = [
            self._montage_path,
            "-mode",
            layout.mode,
            "-background",
            layout.background,
            "-geometry",
            layout.geometry,
            "-tile",
            f"{layout.columns}x",
            *files,
            output_path,
        ]
        self._run(args, "montage")
        logger.debug(
            "Composed %d frames into %s",
            len(files),
            output_path,
            extra={"columns": layout.columns},
        )
        return frame_size
