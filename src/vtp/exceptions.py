"""Exception hierarchy for Video Transcode Planner.

Errors are raised where planning or supervision cannot continue. Capability
mismatches are not errors: the capability gate returns False and callers
skip the output.
"""


class VTPError(Exception):
    """Base class for all Video Transcode Planner errors."""


class ValidationError(VTPError):
    """Raised when a request cannot be planned.

    Covers a missing required track, a preset set without exactly one
    default preset, and a job plan with no outputs. Always raised before
    any subprocess is started and never retried.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class ProcessError(VTPError):
    """Raised when the transcoding engine reports a failure.

    Attributes:
        returncode: Process exit status, if known.
        stderr: Captured standard error text.
        stdout: Captured standard output text.
    """

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str = "",
        stdout: str = "",
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(message)


class CancellationError(VTPError):
    """Raised when a job was explicitly killed.

    Distinct from ProcessError even though the process also exits
    abnormally after the kill signal.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Transcode job {job_id} was killed")


class FinalizationError(VTPError):
    """Raised by a finalization step (re-probe, compositor).

    Never fatal to a job: the supervisor logs it and leaves the affected
    result field empty.
    """
