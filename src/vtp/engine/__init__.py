"""Transcoding engine protocol and the ffmpeg implementation."""

from vtp.engine.ffmpeg import FFmpegEngine, FFmpegProcess
from vtp.engine.interface import (
    EngineOutcome,
    EngineProcess,
    ProgressCallback,
    TranscodingEngine,
)
from vtp.engine.progress import FFmpegProgress, parse_stderr_progress

__all__ = [
    "EngineOutcome",
    "EngineProcess",
    "ProgressCallback",
    "TranscodingEngine",
    "FFmpegEngine",
    "FFmpegProcess",
    "FFmpegProgress",
    "parse_stderr_progress",
]
