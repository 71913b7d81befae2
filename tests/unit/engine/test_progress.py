"""Tests for ffmpeg progress parsing."""

from vtp.engine import parse_stderr_progress


class TestParseStderrProgress:
    """Tests for parse_stderr_progress."""

    def test_stats_line(self):
        line = (
            "frame= 1234 fps= 30 q=28.0 size=   10240kB time=00:00:41.13 "
            "bitrate=2039.1kbits/s speed=1.2x\n"
        )
        progress = parse_stderr_progress(line)

        assert progress.frame == 1234
        assert progress.fps == 30.0
        assert progress.size_kb == 10240
        assert progress.out_time_us == 41_130_000
        assert progress.out_time_seconds == 41.13
        assert progress.bitrate == "2039.1kbits/s"
        assert progress.speed == "1.2x"
        assert progress.raw == line.strip()

    def test_kib_size_unit(self):
        progress = parse_stderr_progress("frame=   10 fps=0.0 size=     256KiB time=00:00:00.40")
        assert progress.size_kb == 256

    def test_not_available_values(self):
        progress = parse_stderr_progress(
            "frame=    0 fps=0.0 q=0.0 size=N/A time=-00:00:00.04 bitrate=N/A speed=N/A"
        )
        assert progress.frame == 0
        assert progress.size_kb is None
        assert progress.out_time_us is None
        assert progress.out_time_seconds is None
        assert progress.bitrate is None
        assert progress.speed is None

    def test_other_lines_are_ignored(self):
        assert parse_stderr_progress("Input #0, matroska,webm, from 'movie.mkv':") is None
        assert parse_stderr_progress("") is None
