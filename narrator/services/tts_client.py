"""
Speech provider adapter wrapping Microsoft Edge read-aloud synthesis.
"""
import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp
import edge_tts
from edge_tts.exceptions import EdgeTTSException

from narrator.config import DEFAULT_VOICE, VOICE_PITCH, VOICE_RATE, VOICE_VOLUME
from narrator.errors import ProviderError

logger = logging.getLogger(__name__)

# Failures that may occur while the provider stream is open
STREAM_ERRORS = (EdgeTTSException, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class SynthesisClient:
    """
    Contract for a remote speech provider.

    Implementations return the complete audio for one piece of text, or
    raise ProviderError. Partial audio is never returned.
    """

    def prepare(self, voice: Optional[str]) -> str:
        """Resolve the voice once per job; the result is reused for every segment."""
        voice = (voice or '').strip()
        return voice or DEFAULT_VOICE

    async def synthesize(self, text: str, voice: str) -> bytes:
        raise NotImplementedError

    async def list_voices(self) -> List[Dict]:
        return []


class EdgeSynthesisClient(SynthesisClient):
    """
    Streams audio from the Edge read-aloud service into a single buffer.

    The service always answers in audio-24khz-48kbitrate-mono-mp3.
    """

    def __init__(
        self,
        rate: str = VOICE_RATE,
        volume: str = VOICE_VOLUME,
        pitch: str = VOICE_PITCH,
        proxy: Optional[str] = None,
    ):
        self.rate = rate
        self.volume = volume
        self.pitch = pitch
        self.proxy = proxy
        self._voices: Optional[List[Dict]] = None

    async def synthesize(self, text: str, voice: str) -> bytes:
        buffer = bytearray()
        try:
            communicate = edge_tts.Communicate(
                text,
                voice,
                rate=self.rate,
                volume=self.volume,
                pitch=self.pitch,
                proxy=self.proxy,
            )
            async for chunk in communicate.stream():
                if chunk['type'] == 'audio':
                    buffer.extend(chunk['data'])
        except STREAM_ERRORS as e:
            raise ProviderError(f'Synthesis stream failed for voice {voice}: {e}') from e

        if not buffer:
            raise ProviderError(f'No audio received for voice {voice}')

        return bytes(buffer)

    async def list_voices(self) -> List[Dict]:
        """Fetch the provider voice catalogue once and cache it."""
        if self._voices is None:
            try:
                self._voices = await edge_tts.list_voices(proxy=self.proxy)
            except STREAM_ERRORS as e:
                raise ProviderError(f'Could not list voices: {e}') from e
            logger.info('Loaded %d provider voices', len(self._voices))
        return self._voices
