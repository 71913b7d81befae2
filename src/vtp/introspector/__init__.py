"""Introspector module for Video Transcode Planner.

This module provides media introspection capabilities:

- MediaIntrospector: Protocol defining the introspection interface
- FFprobeIntrospector: Production implementation using ffprobe
- MediaIntrospectionError: Exception for introspection failures
"""

from vtp.introspector.ffprobe import FFprobeIntrospector
from vtp.introspector.formatters import format_human, format_json
from vtp.introspector.interface import (
    MediaIntrospectionError,
    MediaIntrospector,
)
from vtp.introspector.parsers import parse_ffprobe_output

__all__ = [
    "MediaIntrospector",
    "MediaIntrospectionError",
    "FFprobeIntrospector",
    "parse_ffprobe_output",
    # Formatters
    "format_human",
    "format_json",
]
