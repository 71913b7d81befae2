"""Builders and protocol fakes shared by the unit tests."""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from vtp.compositor.interface import CompositeLayout, CompositorError, ImageResult
from vtp.domain.models import IntrospectionResult, MediaDescriptor, TrackInfo
from vtp.engine.interface import EngineOutcome, ProgressCallback
from vtp.exceptions import ProcessError
from vtp.executor.types import JobPlan
from vtp.presets.types import (
    AudioConstraints,
    PresetSpec,
    SubtitleConstraints,
    ThumbnailConstraints,
    VideoConstraints,
)


def video_track(
    index: int = 0,
    width: int | None = 1920,
    height: int | None = 1080,
    codec: str = "h264",
    **kwargs,
) -> TrackInfo:
    return TrackInfo(
        index=index,
        track_type="video",
        codec=codec,
        width=width,
        height=height,
        **kwargs,
    )


def audio_track(
    index: int, language: str | None = None, codec: str = "aac", **kwargs
) -> TrackInfo:
    return TrackInfo(
        index=index, track_type="audio", codec=codec, language=language, **kwargs
    )


def subtitle_track(
    index: int, language: str | None = None, codec: str = "subrip", **kwargs
) -> TrackInfo:
    return TrackInfo(
        index=index, track_type="subtitle", codec=codec, language=language, **kwargs
    )


def make_descriptor(
    tracks: Sequence[TrackInfo], path: Path = Path("/media/movie.mkv")
) -> MediaDescriptor:
    return MediaDescriptor(
        path=path,
        video_tracks=tuple(t for t in tracks if t.track_type == "video"),
        audio_tracks=tuple(t for t in tracks if t.track_type == "audio"),
        subtitle_tracks=tuple(t for t in tracks if t.track_type == "subtitle"),
        container_format="matroska,webm",
    )


def make_result(
    tracks: Sequence[TrackInfo], path: Path = Path("/media/movie.mkv")
) -> IntrospectionResult:
    return IntrospectionResult(
        file_path=path,
        container_format="matroska,webm",
        tracks=list(tracks),
        duration_seconds=120.0,
    )


def make_preset(
    name: str,
    height: int | None = 720,
    width: int | None = None,
    bitrate: int = 2_500_000,
    audio_bitrate: int | None = 128_000,
    is_default: bool = False,
    video_codec: str | None = "h264",
    audio_codec: str | None = "aac",
    subtitle: SubtitleConstraints | None = None,
    thumbnails: ThumbnailConstraints | None = None,
) -> PresetSpec:
    video = None
    if height is not None:
        video = VideoConstraints(
            width=width if width is not None else height * 16 // 9 // 2 * 2,
            height=height,
            bitrate=bitrate,
            codec=video_codec,
        )
    audio = None
    if audio_bitrate is not None:
        audio = AudioConstraints(bitrate=audio_bitrate, channels=2, codec=audio_codec)
    return PresetSpec(
        name=name,
        format="mp4",
        extension="mp4",
        is_default=is_default,
        video=video,
        audio=audio,
        subtitle=subtitle,
        thumbnails=thumbnails,
    )


class FakeProcess:
    """EngineProcess whose exit is driven by the test."""

    def __init__(self) -> None:
        self.kill_calls: list[int] = []
        self.exit_on_kill = True
        self._outcome: EngineOutcome | None = None
        self._done = threading.Event()

    def finish(self, outcome: EngineOutcome) -> None:
        self._outcome = outcome
        self._done.set()

    def kill(self, sig: int = signal.SIGKILL) -> None:
        self.kill_calls.append(sig)
        if self.exit_on_kill and not self._done.is_set():
            self.finish(EngineOutcome(returncode=-sig, stderr="Killed\n"))

    def wait(self) -> EngineOutcome:
        if not self._done.wait(timeout=10):
            raise RuntimeError("FakeProcess was never finished")
        assert self._outcome is not None
        return self._outcome


class FakeEngine:
    """TranscodingEngine recording runs and serving canned probe results."""

    def __init__(
        self,
        probe_result: IntrospectionResult | None = None,
        start_error: Exception | None = None,
    ) -> None:
        self.process = FakeProcess()
        self.probe_result = probe_result
        self.start_error = start_error
        self.runs: list[JobPlan] = []
        self.on_progress: ProgressCallback | None = None
        self.probed: list[Path] = []

    def probe(self, path: Path) -> IntrospectionResult:
        self.probed.append(path)
        if self.probe_result is None:
            raise ProcessError(f"cannot probe {path}")
        return self.probe_result

    def run(self, plan: JobPlan, on_progress: ProgressCallback | None = None):
        if self.start_error is not None:
            raise self.start_error
        self.runs.append(plan)
        self.on_progress = on_progress
        return self.process


class FakeCompositor:
    """Compositor writing an empty sheet and returning a fixed tile size."""

    def __init__(
        self,
        tile: ImageResult = ImageResult(width=160, height=90),
        error: Exception | None = None,
        hook: Callable[[], None] | None = None,
    ) -> None:
        self.tile = tile
        self.error = error
        self.hook = hook
        self.calls: list[tuple[list[Path], CompositeLayout, Path]] = []

    def compose(
        self, files: Sequence[Path], layout: CompositeLayout, output_path: Path
    ) -> ImageResult:
        self.calls.append((list(files), layout, output_path))
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            raise self.error
        if not files:
            raise CompositorError("No thumbnails found")
        output_path.write_bytes(b"sheet")
        return self.tile


class RecordingLifecycle:
    """ProcessLifecycle recording register/unregister calls."""

    def __init__(self) -> None:
        self.registered: list[object] = []
        self.unregistered: list[object] = []
        self._lock = threading.Lock()

    def register(self, process) -> None:
        with self._lock:
            self.registered.append(process)

    def unregister(self, process) -> None:
        with self._lock:
            self.unregistered.append(process)
