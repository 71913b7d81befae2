"""Compositor interface: merge still frames into one sprite sheet."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vtp.exceptions import FinalizationError

DEFAULT_COLUMNS = 6


class CompositorError(FinalizationError):
    """Raised when the sprite sheet cannot be composed."""


@dataclass(frozen=True)
class CompositeLayout:
    """Tiling parameters for a sprite sheet."""

    columns: int = DEFAULT_COLUMNS
    background: str = "black"
    geometry: str = "+0+0"
    mode: str = "concatenate"


@dataclass(frozen=True)
class ImageResult:
    """Pixel size of one tile of the composed sheet."""

    width: int
    height: int


class Compositor(Protocol):
    def compose(
        self, files: Sequence[Path], layout: CompositeLayout, output_path: Path
    ) -> ImageResult:
        """Tile ``files`` in order into ``output_path``.

        Raises:
            CompositorError: If composition fails.
        """
        ...
