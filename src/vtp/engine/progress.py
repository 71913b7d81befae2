"""FFmpeg progress parsing.

ffmpeg run with ``-stats_period 1`` writes one stats line per second to
stderr:

    frame= 1234 fps= 30 q=28.0 size=  10240kB time=00:00:41.13 bitrate=2039.1kbits/s speed=1.2x
"""

import re
from dataclasses import dataclass

PROGRESS_PATTERNS = {
    "frame": re.compile(r"frame=\s*(\d+)"),
    "fps": re.compile(r"fps=\s*([\d.]+)"),
    "bitrate": re.compile(r"bitrate=\s*([^\s]+)"),
    "size": re.compile(r"size=\s*(\d+)\s*[kK]i?B"),
    "speed": re.compile(r"speed=\s*([^\s]+)"),
}

_TIME_PATTERN = re.compile(r"time=(-?)(\d+):(\d+):(\d+)\.(\d+)")


@dataclass(frozen=True)
class FFmpegProgress:
    """One parsed ffmpeg stats line."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    size_kb: int | None = None
    out_time_us: int | None = None
    speed: str | None = None
    raw: str = ""

    @property
    def out_time_seconds(self) -> float | None:
        """Get output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None


def _convert(key: str, value: str) -> int | float | str | None:
    if key in ("frame", "size"):
        try:
            return int(value)
        except ValueError:
            return None
    if key == "fps":
        try:
            return float(value)
        except ValueError:
            return None
    return value if value != "N/A" else None


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an FFmpeg stderr progress line.

    Args:
        line: A line from FFmpeg stderr.

    Returns:
        Parsed FFmpegProgress or None if not a progress line.
    """
    if "frame=" not in line:
        return None

    values: dict[str, int | float | str | None] = {}
    for key, pattern in PROGRESS_PATTERNS.items():
        match = pattern.search(line)
        if match:
            values[key] = _convert(key, match.group(1))

    out_time_us = None
    time_match = _TIME_PATTERN.search(line)
    if time_match and not time_match.group(1):
        hours, minutes, seconds = (int(time_match.group(i)) for i in (2, 3, 4))
        fraction = time_match.group(5)
        out_time_us = (hours * 3600 + minutes * 60 + seconds) * 1_000_000 + int(
            fraction.ljust(6, "0")[:6]
        )

    return FFmpegProgress(
        frame=values.get("frame"),
        fps=values.get("fps"),
        bitrate=values.get("bitrate"),
        size_kb=values.get("size"),
        out_time_us=out_time_us,
        speed=values.get("speed"),
        raw=line.strip(),
    )
