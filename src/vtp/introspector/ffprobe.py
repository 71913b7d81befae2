"""FFprobe-based implementation of MediaIntrospector protocol."""

import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vtp.core.subprocess_utils import run_command
from vtp.domain.models import IntrospectionResult
from vtp.introspector.interface import MediaIntrospectionError
from vtp.introspector.parsers import parse_ffprobe_output


class FFprobeIntrospector:
    """ffprobe-based implementation of MediaIntrospector protocol.

    Extracts track-level metadata from video files using ffprobe.
    """

    def __init__(self, ffprobe_path: Path | None = None, timeout: int = 60) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the path from configuration or system PATH.
            timeout: Seconds before a probe is abandoned.

        Raises:
            MediaIntrospectionError: If ffprobe is not available.
        """
        self._ffprobe_path = ffprobe_path or self._get_configured_path()
        self._timeout = timeout

        if self._ffprobe_path is None:
            raise MediaIntrospectionError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg to use media introspection features. "
                "You can also configure a custom path via VTP_FFPROBE_PATH "
                "environment variable or ~/.vtp/config.toml"
            )

    @staticmethod
    def _get_configured_path() -> Path | None:
        from vtp.config.loader import get_tool_path

        return get_tool_path("ffprobe")

    def get_file_info(self, path: Path) -> IntrospectionResult:
        """Extract metadata from a video file.

        Args:
            path: Path to the video file.

        Returns:
            IntrospectionResult containing file metadata and track information.

        Raises:
            MediaIntrospectionError: If the file cannot be introspected.
        """
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        try:
            ffprobe_output = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"Could not run ffprobe: {e}") from e
        except json.JSONDecodeError as e:
            raise MediaIntrospectionError(
                f"Invalid ffprobe output for {path}: {e}"
            ) from e

        return parse_ffprobe_output(path, ffprobe_output)

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            MediaIntrospectionError: If ffprobe fails or output is missing
                required keys.
            json.JSONDecodeError: If output is not valid JSON.
        """
        stdout, stderr, returncode = run_command(
            [
                self._ffprobe_path,
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                "-show_format",
                path,
            ],
            timeout=self._timeout,
        )
        if returncode != 0:
            raise MediaIntrospectionError(
                f"ffprobe failed for {path}: {stderr.strip() or returncode}"
            )

        data = json.loads(stdout)

        if "streams" not in data:
            raise MediaIntrospectionError(
                f"Missing 'streams' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        if "format" not in data:
            raise MediaIntrospectionError(
                f"Missing 'format' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )

        return data
