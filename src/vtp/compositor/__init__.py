"""Sprite sheet composition."""

from vtp.compositor.interface import (
    CompositeLayout,
    Compositor,
    CompositorError,
    ImageResult,
)
from vtp.compositor.montage import MontageCompositor

__all__ = [
    "CompositeLayout",
    "Compositor",
    "CompositorError",
    "ImageResult",
    "MontageCompositor",
]
