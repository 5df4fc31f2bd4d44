"""
Error types raised by the synthesis pipeline.

Routers translate these into HTTP responses; nothing here is process-fatal.
"""


class NarratorError(Exception):
    """Base class for all narrator errors."""


class MissingInput(NarratorError):
    """Required caller input (script text, voice) was absent or blank."""


class ProviderError(NarratorError):
    """The speech provider failed or returned no audio. Transient."""


class SegmentSynthesisFailed(NarratorError):
    """A segment could not be synthesized within the attempt budget."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class NotFound(NarratorError):
    """Unknown or expired job or artifact."""


class JobNotFound(NotFound):
    def __init__(self, job_id: str):
        super().__init__(f'Job not found: {job_id}')
        self.job_id = job_id


class ArtifactNotFound(NotFound):
    def __init__(self, filename: str):
        super().__init__(f'File not found or expired: {filename}')
        self.filename = filename


class PathTraversalRejected(NarratorError):
    """An untrusted filename tried to escape the artifact directory."""

    def __init__(self, name: str):
        super().__init__(f'Invalid file name: {name!r}')
        self.name = name


class InvalidJobTransition(NarratorError):
    """A job was moved to a state its current state does not allow."""
