"""Process exit codes of the vtp commands.

The tens digit groups codes by where a run stopped: input validation (1x),
the source file (2x), external tools (3x), the transcode job (4x) and
probing (5x). A clean run exits 0.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for vtp commands."""

    # Ctrl+C during ``vtp transcode``; the job was killed first
    INTERRUPTED = 2

    # Preset file is not valid YAML or fails validation
    PRESET_VALIDATION_ERROR = 10
    # config.toml or the forced-subtitle settings are invalid
    CONFIG_ERROR = 11
    # No usable audio/video track, or a bad --language pattern
    SELECTION_ERROR = 12

    # Source or preset file does not exist
    TARGET_NOT_FOUND = 20

    # ffmpeg or another transcode tool could not be found
    TOOL_NOT_AVAILABLE = 30
    # ffprobe could not be found
    FFPROBE_NOT_FOUND = 32

    # ffmpeg exited with an error
    OPERATION_FAILED = 40
    # The job was killed before it finished
    JOB_KILLED = 41

    # ffprobe could not read the source
    PARSE_ERROR = 51
