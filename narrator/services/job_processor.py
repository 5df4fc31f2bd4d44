"""
Background job orchestration for script-to-audio generation.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Set

from narrator.config import CHARS_PER_SECOND, MAX_SEGMENT_LENGTH, PREVIEW_TEXT, SHUTDOWN_GRACE_SECONDS
from narrator.errors import JobNotFound, MissingInput, SegmentSynthesisFailed
from narrator.models.job import Job, JobResult, utcnow
from narrator.services.artifacts import ArtifactKind, ArtifactManager, check_untrusted_name, get_artifact_manager
from narrator.services.job_store import JobStore, get_job_store
from narrator.services.segmenter import segment_text
from narrator.services.synthesizer import RetryingSynthesizer
from narrator.services.tts_client import EdgeSynthesisClient, SynthesisClient

logger = logging.getLogger(__name__)

# Stored on failed jobs; provider detail only goes to the log
GENERATION_FAILED_MESSAGE = 'Audio generation failed. Please try again.'


def estimate_duration_minutes(text_length: int) -> float:
    """Spoken length heuristic: 15 characters per second."""
    return round(text_length / CHARS_PER_SECOND / 60, 1)


class JobProcessor:
    """
    Registers jobs and runs each one as a detached asyncio task.

    Segments within a job are synthesized strictly in order; jobs themselves
    run concurrently without a bound. Task references are held only so they
    survive garbage collection and can be drained on shutdown.
    """

    def __init__(
        self,
        store: JobStore,
        artifacts: ArtifactManager,
        client: SynthesisClient,
        synthesizer: Optional[RetryingSynthesizer] = None,
        max_segment_length: int = MAX_SEGMENT_LENGTH,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.artifacts = artifacts
        self.client = client
        self.synthesizer = synthesizer or RetryingSynthesizer(client)
        self.max_segment_length = max_segment_length
        self._clock = clock
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    def submit(self, text: Optional[str], voice: Optional[str] = None) -> str:
        """
        Register a pending job and start it in the background.

        Returns the job id immediately.

        Raises:
            MissingInput: text is absent or blank
        """
        if not text or not text.strip():
            raise MissingInput('Script required')

        job = Job(
            voice=self.client.prepare(voice),
            text_length=len(text),
            created_at=self._clock(),
        )
        self.store.put(job)

        task = asyncio.create_task(self._process_job(job, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info('Job %s registered (%d chars, voice %s)', job.id, len(text), job.voice)
        return job.id

    def query_status(self, job_id: str) -> Job:
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    async def delete_job(self, job_id: str):
        """Remove a job record and its generated audio, if any."""
        job = self.store.delete(job_id)
        if job is None:
            raise JobNotFound(job_id)
        await self.artifacts.delete(ArtifactKind.generated, job.id)

    async def preview_voice(self, voice: Optional[str]) -> str:
        """
        Return the URL of a short sample spoken by ``voice``.

        The sample is synthesized once per voice and served from disk
        afterwards. ProviderError propagates to the caller.
        """
        voice = (voice or '').strip()
        if not voice:
            raise MissingInput('Voice ID required')
        check_untrusted_name(voice)

        filename = self.artifacts.filename(ArtifactKind.preview, voice)
        if not self.artifacts.exists(ArtifactKind.preview, voice):
            audio = await self.client.synthesize(PREVIEW_TEXT, voice)
            await self.artifacts.write(ArtifactKind.preview, voice, audio)
            logger.info('Cached preview for voice %s', voice)

        return self.artifacts.url_for(filename)

    async def _process_job(self, job: Job, text: str):
        """Run one job to a terminal state."""
        job.mark_processing()

        try:
            segments = segment_text(text, self.max_segment_length)
            total = len(segments)
            logger.info('Job %s split into %d segment(s)', job.id, total)

            buffers = []
            for index, segment in enumerate(segments):
                job.update_progress(100 * index // total)
                buffers.append(await self.synthesizer.synthesize(segment, job.voice))

            path = await self.artifacts.publish_generation(job.id, b''.join(buffers))

            job.mark_completed(
                JobResult(
                    filename=path.name,
                    audio_url=self.artifacts.url_for(path.name),
                    duration_estimate=estimate_duration_minutes(job.text_length),
                ),
                completed_at=self._clock(),
            )
            logger.info('Job %s completed: %s', job.id, path.name)

        except SegmentSynthesisFailed as e:
            job.mark_failed(GENERATION_FAILED_MESSAGE, completed_at=self._clock())
            logger.error('Job %s failed after %d attempts: %s', job.id, e.attempts, e.__cause__)

        except Exception:
            job.mark_failed(GENERATION_FAILED_MESSAGE, completed_at=self._clock())
            logger.exception('Job %s failed', job.id)

    async def drain(self):
        """Wait for every in-flight job to reach a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self, timeout: float = SHUTDOWN_GRACE_SECONDS):
        """Give in-flight jobs a grace period, then cancel the rest."""
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self.drain(), timeout=timeout)
        except asyncio.TimeoutError:
            pending = list(self._tasks)
            logger.warning('Cancelling %d unfinished job(s)', len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)


# Singleton instance
_job_processor: Optional[JobProcessor] = None


def get_job_processor() -> JobProcessor:
    """
    Get the job processor singleton instance.

    Usage with FastAPI dependency injection:
        @router.post('/jobs')
        async def create_job(processor: JobProcessor = Depends(get_job_processor)):
            ...
    """
    global _job_processor
    if _job_processor is None:
        _job_processor = JobProcessor(
            store=get_job_store(),
            artifacts=get_artifact_manager(),
            client=EdgeSynthesisClient(),
        )
    return _job_processor


def reset_job_processor():
    """Reset the job processor singleton (for testing)."""
    global _job_processor
    _job_processor = None
