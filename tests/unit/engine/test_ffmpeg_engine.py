"""Tests for the ffmpeg engine."""

import io
import signal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vtp.engine import FFmpegEngine, FFmpegProcess
from vtp.exceptions import ProcessError
from vtp.executor import AVOutputSpec, JobPlan

POPEN = "vtp.engine.ffmpeg.subprocess.Popen"


def _popen(stderr: str = "", stdout: str = "", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.pid = 4242
    process.stderr = io.StringIO(stderr)
    process.stdout = io.StringIO(stdout)
    process.wait.return_value = returncode
    process.poll.return_value = None
    return process


def _plan() -> JobPlan:
    return JobPlan(
        input_path=Path("/media/movie.mkv"),
        output_dir=Path("/out"),
        prefix="movie",
        av_outputs=(
            AVOutputSpec(
                name="audio",
                path=Path("/out/movie.audio.m4a"),
                format="ipod",
                maps=("0:1",),
            ),
        ),
    )


class TestFFmpegProcess:
    """Tests for FFmpegProcess."""

    def test_relays_progress_and_keeps_stderr(self):
        received = []
        popen = _popen(
            stderr="Input #0\nframe=   48 fps= 24 size=     512kB time=00:00:02.00\n"
        )

        outcome = FFmpegProcess(popen, received.append).wait()

        assert [p.frame for p in received] == [48]
        assert outcome.success
        assert outcome.returncode == 0
        assert outcome.stderr.startswith("Input #0\n")

    def test_failure_outcome(self):
        popen = _popen(stderr="Unknown encoder 'libfoo'\n", stdout="", returncode=1)

        outcome = FFmpegProcess(popen).wait()

        assert not outcome.success
        assert outcome.error_message == "ffmpeg exited with code 1"
        assert "Unknown encoder" in outcome.stderr

    def test_progress_callback_errors_are_logged(self, caplog):
        def explode(progress):
            raise RuntimeError("display gone")

        popen = _popen(stderr="frame= 1 fps=1\n")
        outcome = FFmpegProcess(popen, explode).wait()

        assert outcome.success
        assert "Progress callback error: display gone" in caplog.text

    def test_kill_sends_signal_while_running(self):
        popen = _popen()
        process = FFmpegProcess(popen)
        process.kill()
        popen.send_signal.assert_called_once_with(signal.SIGKILL)
        process.wait()

    def test_kill_after_exit_is_noop(self):
        popen = _popen()
        popen.poll.return_value = 0
        process = FFmpegProcess(popen)
        process.kill()
        popen.send_signal.assert_not_called()
        process.wait()


class TestFFmpegEngine:
    """Tests for FFmpegEngine."""

    def test_missing_ffmpeg(self):
        with patch("vtp.config.loader.get_tool_path", return_value=None):
            with pytest.raises(ProcessError, match="ffmpeg is not installed"):
                FFmpegEngine()

    def test_command_uses_preview_limit(self):
        engine = FFmpegEngine(Path("/usr/bin/ffmpeg"), preview_seconds=15)
        cmd = engine.command_for(_plan())
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert cmd[cmd.index("-t") + 1] == "15"

    def test_run_spawns_ffmpeg(self):
        popen = _popen()
        with patch(POPEN, return_value=popen) as spawn:
            process = FFmpegEngine(Path("/usr/bin/ffmpeg")).run(_plan())
            process.wait()

        cmd = spawn.call_args.args[0]
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert cmd[-1] == "/out/movie.audio.m4a"
        assert process.pid == 4242

    def test_run_start_failure(self):
        with patch(POPEN, side_effect=FileNotFoundError("no such file")):
            with pytest.raises(ProcessError, match="Could not start ffmpeg"):
                FFmpegEngine(Path("/usr/bin/ffmpeg")).run(_plan())

    def test_probe_delegates_to_introspector(self):
        introspector = MagicMock()
        engine = FFmpegEngine(Path("/usr/bin/ffmpeg"), introspector=introspector)
        engine.probe(Path("/out/movie.audio.m4a"))
        introspector.get_file_info.assert_called_once_with(Path("/out/movie.audio.m4a"))
