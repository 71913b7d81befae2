"""Tests for job supervision."""

import signal
from pathlib import Path

import pytest

from vtp.domain.enums import JobState
from vtp.engine import EngineOutcome, FFmpegProgress
from vtp.exceptions import CancellationError, ProcessError
from vtp.executor import AVOutputSpec, JobPlan, ThumbnailBranch
from vtp.jobs import JobSupervisor
from vtp.jobs.supervisor import _END, compute_eta, failure_diagnostic

from factories import (
    FakeCompositor,
    FakeEngine,
    RecordingLifecycle,
    make_result,
    video_track,
)


def _plan(output_dir: Path, *, thumbnails: bool = False, total_frames: int = 2880) -> JobPlan:
    branch = None
    if thumbnails:
        branch = ThumbnailBranch(
            track=video_track(0),
            directory=output_dir / "thumbs",
            pattern=f"{output_dir}/thumbs/snap.%03d.jpg",
            format="image2",
            maps=("[thumbs]",),
            options=(),
            delay=0.1,
            columns=6,
            sheet_path=output_dir / "movie.thumbs.jpg",
        )
    return JobPlan(
        input_path=Path("/media/movie.mkv"),
        output_dir=output_dir,
        prefix="movie",
        av_outputs=(
            AVOutputSpec(
                name="720p",
                path=output_dir / "movie.720p.mp4",
                format="mp4",
                maps=("[v0]", "0:1"),
                resolution=(1280, 720),
                duration=120.0,
            ),
        ),
        thumbnails=branch,
        total_frames=total_frames,
    )


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def lifecycle() -> RecordingLifecycle:
    return RecordingLifecycle()


@pytest.fixture
def supervisor(engine, lifecycle) -> JobSupervisor:
    return JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle, finalize_workers=2)


class TestComputeEta:
    """Tests for compute_eta."""

    def test_remaining_frames_over_fps(self):
        assert compute_eta(2880, 720, 24.0) == 90.0

    def test_slow_or_unknown_fps_counts_as_one(self):
        assert compute_eta(100, 40, 0.5) == 60.0
        assert compute_eta(100, 40, None) == 60.0

    def test_never_negative(self):
        assert compute_eta(100, 150, 10.0) == 0.0


class TestFailureDiagnostic:
    """Tests for failure_diagnostic."""

    def test_prefers_stderr(self):
        outcome = EngineOutcome(1, "ffmpeg exited with code 1", "out", "Conversion failed!\n")
        assert failure_diagnostic(outcome) == "Conversion failed!"

    def test_falls_back_to_error_message_then_stdout(self):
        assert failure_diagnostic(EngineOutcome(1, "exit 1", "out", "  \n")) == "exit 1"
        assert failure_diagnostic(EngineOutcome(1, None, "out\n", "")) == "out"

    def test_nothing_captured(self):
        assert failure_diagnostic(EngineOutcome(3)) == "Engine exited with code 3"


class TestJobSupervisorSuccess:
    """Tests for a job that runs to completion."""

    def test_finishes_with_result(self, supervisor, engine, lifecycle, tmp_path):
        output_dir = tmp_path / "out"
        plan = _plan(output_dir)

        handle = supervisor.start(plan, transit_data={"request": 7})

        assert handle.state is JobState.RUNNING
        assert output_dir.is_dir()
        assert engine.runs == [plan]
        (output_dir / "movie.720p.mp4").write_bytes(b"x" * 64)
        engine.process.finish(EngineOutcome(returncode=0))

        result = handle.result(timeout=10)

        assert handle.state is JobState.FINISHED
        assert result.job_id == handle.job_id
        assert result.input_path == Path("/media/movie.mkv")
        assert result.transit_data == {"request": 7}
        (output,) = result.outputs
        assert output.name == "720p"
        assert output.duration == 120.0
        assert output.resolution == (1280, 720)
        assert output.size == 64
        assert result.thumbnails is None
        assert lifecycle.registered == [engine.process]
        assert lifecycle.unregistered == [engine.process]

    def test_progress_events(self, supervisor, engine, tmp_path):
        received = []
        handle = supervisor.start(_plan(tmp_path / "out"), on_progress=received.append)

        engine.on_progress(FFmpegProgress(frame=720, fps=24.0, raw="frame=720"))
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)

        events = list(handle.progress_events())
        assert events == received
        (event,) = events
        assert event.job_id == handle.job_id
        assert event.frames == 720
        assert event.total_frames == 2880
        assert event.percent == 25.0
        assert event.eta_seconds == 90.0

    def test_unknown_total_frames_has_no_percent(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out", total_frames=0))
        engine.on_progress(FFmpegProgress(frame=10, fps=5.0))
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)

        (event,) = list(handle.progress_events())
        assert event.percent is None
        assert event.eta_seconds == 0.0

    def test_percent_is_capped(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out", total_frames=100))
        engine.on_progress(FFmpegProgress(frame=150, fps=5.0))
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)

        (event,) = list(handle.progress_events())
        assert event.percent == 100.0

    def test_listener_errors_do_not_fail_the_job(self, supervisor, engine, tmp_path, caplog):
        def broken(_):
            raise RuntimeError("listener broke")

        handle = supervisor.start(_plan(tmp_path / "out"), on_progress=broken, on_start=broken)
        engine.on_progress(FFmpegProgress(frame=1, fps=1.0))
        engine.process.finish(EngineOutcome(returncode=0))

        handle.result(timeout=10)
        assert "Start listener error: listener broke" in caplog.text
        assert "Progress listener error: listener broke" in caplog.text

    def test_on_start_receives_running_handle(self, supervisor, engine, tmp_path):
        seen = []
        handle = supervisor.start(
            _plan(tmp_path / "out"), on_start=lambda h: seen.append((h, h.state))
        )
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)
        assert seen == [(handle, JobState.RUNNING)]

    def test_thumbnail_sheet(self, engine, lifecycle, tmp_path):
        compositor = FakeCompositor()
        supervisor = JobSupervisor(engine, compositor, lifecycle=lifecycle)
        plan = _plan(tmp_path / "out", thumbnails=True)

        handle = supervisor.start(plan)
        for i in (1, 2, 3):
            (plan.thumbnails.directory / f"snap.{i:03d}.jpg").write_bytes(b"")
        engine.process.finish(EngineOutcome(returncode=0))
        result = handle.result(timeout=10)

        sheet = result.thumbnails
        assert sheet.file == plan.thumbnails.sheet_path
        assert sheet.frame_count == 3
        assert sheet.frame_size == (160, 90)
        assert sheet.size == len(b"sheet")
        assert not plan.thumbnails.directory.exists()


class TestJobSupervisorFailure:
    """Tests for jobs that fail."""

    def test_engine_failure(self, supervisor, engine, lifecycle, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out"))
        engine.process.finish(
            EngineOutcome(
                returncode=1,
                error_message="ffmpeg exited with code 1",
                stderr="Unknown encoder 'libfoo'\n",
            )
        )

        with pytest.raises(ProcessError, match="Unknown encoder") as exc_info:
            handle.result(timeout=10)

        assert exc_info.value.returncode == 1
        assert handle.state is JobState.FAILED
        assert lifecycle.unregistered == [engine.process]

    def test_engine_does_not_start(self, lifecycle, tmp_path):
        engine = FakeEngine(start_error=ProcessError("Could not start ffmpeg"))
        supervisor = JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle)

        handle = supervisor.start(_plan(tmp_path / "out"))

        assert handle.state is JobState.FAILED
        with pytest.raises(ProcessError, match="Could not start ffmpeg"):
            handle.result(timeout=1)
        assert lifecycle.registered == []
        assert list(handle.progress_events()) == []

    def test_os_error_while_starting(self, lifecycle, tmp_path):
        engine = FakeEngine(start_error=PermissionError("denied"))
        supervisor = JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle)

        handle = supervisor.start(_plan(tmp_path / "out"))

        with pytest.raises(ProcessError, match="Could not start transcode job: denied"):
            handle.result(timeout=1)


class TestJobKill:
    """Tests for killing jobs."""

    def test_kill_running_job(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out"))

        handle.kill()

        with pytest.raises(CancellationError) as exc_info:
            handle.result(timeout=10)
        assert exc_info.value.job_id == handle.job_id
        assert handle.state is JobState.KILLED
        assert engine.process.kill_calls == [signal.SIGKILL]

    def test_kill_is_idempotent(self, supervisor, engine, tmp_path):
        engine.process.exit_on_kill = False
        handle = supervisor.start(_plan(tmp_path / "out"))

        handle.kill()
        handle.kill()
        engine.process.finish(EngineOutcome(returncode=-9))

        with pytest.raises(CancellationError):
            handle.result(timeout=10)
        assert engine.process.kill_calls == [signal.SIGKILL]

    def test_kill_wins_over_clean_exit(self, supervisor, engine, tmp_path):
        engine.process.exit_on_kill = False
        handle = supervisor.start(_plan(tmp_path / "out"))

        handle.kill()
        engine.process.finish(EngineOutcome(returncode=0))

        with pytest.raises(CancellationError):
            handle.result(timeout=10)

    def test_kill_after_finish_is_noop(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out"))
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)

        handle.kill()

        assert handle.state is JobState.FINISHED
        assert handle.killed is False
        assert engine.process.kill_calls == []

    def test_kill_during_finalization(self, engine, lifecycle, tmp_path):
        handles = []
        compositor = FakeCompositor(hook=lambda: handles[0].kill())
        supervisor = JobSupervisor(engine, compositor, lifecycle=lifecycle)
        plan = _plan(tmp_path / "out", thumbnails=True)

        handles.append(supervisor.start(plan))
        (plan.thumbnails.directory / "snap.001.jpg").write_bytes(b"")
        engine.process.finish(EngineOutcome(returncode=0))

        with pytest.raises(CancellationError):
            handles[0].result(timeout=10)
        assert handles[0].state is JobState.KILLED

    def test_progress_after_kill_is_dropped(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out"))
        handle.kill()
        with pytest.raises(CancellationError):
            handle.result(timeout=10)

        engine.on_progress(FFmpegProgress(frame=5, fps=1.0))

        assert list(handle.progress_events()) == []

    def test_end_marker_stays_last(self, supervisor, engine, tmp_path):
        handle = supervisor.start(_plan(tmp_path / "out"))
        engine.on_progress(FFmpegProgress(frame=10, fps=5.0))
        engine.process.finish(EngineOutcome(returncode=0))
        handle.result(timeout=10)

        engine.on_progress(FFmpegProgress(frame=20, fps=5.0))

        queued = list(handle._events.queue)
        assert len(queued) == 2
        assert queued[-1] is _END

    def test_kill_before_engine_starts(self, lifecycle, tmp_path):
        engine = FakeEngine(start_error=ProcessError("Could not start ffmpeg"))
        supervisor = JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle)

        handle = supervisor.start(_plan(tmp_path / "out"), on_start=lambda h: h.kill())

        assert handle.state is JobState.KILLED
        with pytest.raises(CancellationError) as exc_info:
            handle.result(timeout=1)
        assert exc_info.value.job_id == handle.job_id

    def test_kill_before_engine_fails_with_os_error(self, lifecycle, tmp_path):
        engine = FakeEngine(start_error=PermissionError("denied"))
        supervisor = JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle)

        handle = supervisor.start(_plan(tmp_path / "out"), on_start=lambda h: h.kill())

        with pytest.raises(CancellationError):
            handle.result(timeout=1)
        assert handle.state is JobState.KILLED


class TestJobFinalizationProbe:
    """Tests for duration backfill through the engine."""

    def test_missing_duration_is_probed(self, lifecycle, tmp_path):
        output_dir = tmp_path / "out"
        probed = make_result(
            [video_track(0, 1280, 720, duration_seconds=119.96)],
            path=output_dir / "movie.audio.m4a",
        )
        engine = FakeEngine(probe_result=probed)
        supervisor = JobSupervisor(engine, FakeCompositor(), lifecycle=lifecycle)
        plan = JobPlan(
            input_path=Path("/media/movie.mkv"),
            output_dir=output_dir,
            prefix="movie",
            av_outputs=(
                AVOutputSpec(
                    name="audio",
                    path=output_dir / "movie.audio.m4a",
                    format="ipod",
                    maps=("0:1",),
                ),
            ),
        )

        handle = supervisor.start(plan)
        engine.process.finish(EngineOutcome(returncode=0))
        result = handle.result(timeout=10)

        assert engine.probed == [output_dir / "movie.audio.m4a"]
        assert result.outputs[0].duration == 119.96
        assert result.outputs[0].size is None
