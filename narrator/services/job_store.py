"""
Process-wide job table and the periodic reclaimer that expires old jobs.
"""
import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from narrator.config import JOB_TTL, SWEEP_INTERVAL_SECONDS
from narrator.models.job import Job, utcnow
from narrator.services.artifacts import ArtifactKind, ArtifactManager, get_artifact_manager

logger = logging.getLogger(__name__)


class JobStore:
    """
    In-memory mapping from job id to Job.

    Nothing is persisted; every job is lost on restart. Callers on the event
    loop get atomic read-modify-write as long as they do not await mid-update.
    """

    def __init__(self):
        self._jobs: Dict[str, Job] = {}

    def put(self, job: Job):
        self._jobs[job.id] = job

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def delete(self, job_id: str) -> Optional[Job]:
        return self._jobs.pop(job_id, None)

    def sweep(self, now: datetime, ttl: timedelta) -> List[Job]:
        """Remove and return every job created more than ``ttl`` before ``now``."""
        cutoff = now - ttl
        expired = [job for job in self._jobs.values() if job.created_at < cutoff]
        for job in expired:
            del self._jobs[job.id]
        return expired

    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def count_by_status(self) -> Dict[str, int]:
        return dict(Counter(job.status.value for job in self.jobs()))

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs


class Reclaimer:
    """
    Sweeps the store on a fixed interval.

    Eviction looks at age only, so a job still processing can be evicted;
    its generated artifact (if any) is deleted with the record.
    """

    def __init__(
        self,
        store: JobStore,
        artifacts: ArtifactManager,
        ttl: timedelta = JOB_TTL,
        interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.artifacts = artifacts
        self.ttl = ttl
        self.interval = interval
        self._clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start the periodic sweep."""
        if self._running:
            return
        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self):
        """Stop the sweep loop and wait for it to exit."""
        self._running = False
        if self._task:
            self._stop_event.set()
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None

    async def sweep_once(self) -> List[str]:
        """Evict expired jobs and their artifacts. Returns the evicted ids."""
        expired = self.store.sweep(self._clock(), self.ttl)
        for job in expired:
            await self.artifacts.delete(ArtifactKind.generated, job.id)
            logger.info('Evicted expired job %s (status: %s)', job.id, job.status.value)
        return [job.id for job in expired]

    async def _sweep_loop(self):
        while self._running:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

            if not self._running:
                break

            try:
                await self.sweep_once()
            except Exception:
                # Log but don't stop sweeping
                logger.exception('Error in reclaimer sweep')


# Singleton instances
_job_store: Optional[JobStore] = None
_reclaimer: Optional[Reclaimer] = None


def get_job_store() -> JobStore:
    """Get the job store singleton instance."""
    global _job_store
    if _job_store is None:
        _job_store = JobStore()
    return _job_store


def reset_job_store():
    """Reset the job store singleton (for testing)."""
    global _job_store
    _job_store = None


def get_reclaimer() -> Reclaimer:
    """Get the reclaimer singleton, bound to the store and artifact singletons."""
    global _reclaimer
    if _reclaimer is None:
        _reclaimer = Reclaimer(get_job_store(), get_artifact_manager())
    return _reclaimer


def reset_reclaimer():
    """Reset the reclaimer singleton (for testing)."""
    global _reclaimer
    _reclaimer = None
