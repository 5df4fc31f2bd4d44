"""
In-memory job record for text-to-audio conversions.
"""
import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from narrator.errors import InvalidJobTransition


class JobStatus(str, enum.Enum):
    """Status states for synthesis jobs."""
    pending = 'pending'
    processing = 'processing'
    completed = 'completed'
    failed = 'failed'


TERMINAL_STATUSES = frozenset({JobStatus.completed, JobStatus.failed})

_ALLOWED_TRANSITIONS = {
    JobStatus.pending: {JobStatus.processing},
    JobStatus.processing: {JobStatus.completed, JobStatus.failed},
    JobStatus.completed: set(),
    JobStatus.failed: set(),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobResult:
    """Descriptor of the artifact a completed job produced."""

    def __init__(self, filename: str, audio_url: str, duration_estimate: float):
        self.filename = filename
        self.audio_url = audio_url
        self.duration_estimate = duration_estimate  # minutes, heuristic

    def __repr__(self):
        return f'<JobResult {self.filename}>'


class Job:
    """
    Represents one text-to-audio conversion request.

    Attributes:
        id: Unique job identifier (UUID), the only external handle
        voice: Voice identifier used for every segment
        text_length: Length of the submitted script
        status: Current job status
        progress: Integer percentage, never decreases
        created_at: Submission timestamp, drives expiry
        completed_at: When the job reached a terminal state
        result: Artifact descriptor, set only when completed
        error: User-safe message, set only when failed
    """

    def __init__(
        self,
        voice: str,
        text_length: int,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id or str(uuid.uuid4())
        self.voice = voice
        self.text_length = text_length
        self.status = JobStatus.pending
        self.progress = 0
        self.created_at = created_at or utcnow()
        self.completed_at: Optional[datetime] = None
        self.result: Optional[JobResult] = None
        self.error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _transition(self, target: JobStatus):
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidJobTransition(
                f'Job {self.id} cannot move from {self.status.value} to {target.value}'
            )
        self.status = target

    def mark_processing(self):
        self._transition(JobStatus.processing)

    def update_progress(self, percent: int):
        """Raise progress while processing; lower values are ignored."""
        if self.status != JobStatus.processing:
            raise InvalidJobTransition(f'Job {self.id} is not processing (status: {self.status.value})')
        self.progress = max(self.progress, min(100, int(percent)))

    def mark_completed(self, result: JobResult, completed_at: Optional[datetime] = None):
        self._transition(JobStatus.completed)
        self.progress = 100
        self.result = result
        self.completed_at = completed_at or utcnow()

    def mark_failed(self, message: str, completed_at: Optional[datetime] = None):
        self._transition(JobStatus.failed)
        self.error = message
        self.completed_at = completed_at or utcnow()

    def __repr__(self):
        return f'<Job {self.id} status={self.status.value} progress={self.progress}>'
