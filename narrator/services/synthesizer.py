"""
Per-segment synthesis with bounded retries and provider pacing.
"""
import asyncio
import logging
from typing import Awaitable, Callable

from narrator.config import INTER_SEGMENT_PAUSE_SECONDS, MAX_ATTEMPTS, RETRY_DELAY_SECONDS
from narrator.errors import ProviderError, SegmentSynthesisFailed
from narrator.services.tts_client import SynthesisClient

logger = logging.getLogger(__name__)


class RetryingSynthesizer:
    """
    Drives one segment through the provider.

    A ProviderError is retried after a fixed ``retry_delay`` up to
    ``max_attempts`` total attempts. Every successful segment is followed by
    ``inter_segment_pause`` so consecutive segments do not trip the
    provider's rate limit.
    """

    def __init__(
        self,
        client: SynthesisClient,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        inter_segment_pause: float = INTER_SEGMENT_PAUSE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f'max_attempts must be at least 1, got {max_attempts}')
        self.client = client
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.inter_segment_pause = inter_segment_pause
        self._sleep = sleep

    async def synthesize(self, text: str, voice: str) -> bytes:
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                audio = await self.client.synthesize(text, voice)
            except ProviderError as e:
                last_error = e
                logger.warning(
                    'Segment synthesis attempt %d/%d failed: %s',
                    attempt, self.max_attempts, e,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.retry_delay)
                continue

            await self._sleep(self.inter_segment_pause)
            return audio

        raise SegmentSynthesisFailed(
            f'Segment failed after {self.max_attempts} attempts',
            attempts=self.max_attempts,
        ) from last_error
