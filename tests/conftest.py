"""
Pytest fixtures for testing.
"""
import asyncio
import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

# Keep the app's static mount out of the working tree
os.environ.setdefault('NARRATOR_ARTIFACT_DIR', tempfile.mkdtemp(prefix='narrator-test-'))

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from narrator.errors import ProviderError
from narrator.services.artifacts import ArtifactManager, get_artifact_manager, reset_artifact_manager
from narrator.services.job_processor import JobProcessor, get_job_processor, reset_job_processor
from narrator.services.job_store import JobStore, Reclaimer, reset_job_store, reset_reclaimer
from narrator.services.synthesizer import RetryingSynthesizer
from narrator.services.tts_client import SynthesisClient


class FakeSynthesisClient(SynthesisClient):
    """
    Scripted provider.

    ``failures`` is consumed one entry per call: True raises ProviderError,
    False succeeds. Once exhausted every call succeeds unless
    ``always_fail`` is set. Audio for a text is ``<text>`` as bytes.
    """

    def __init__(self, failures: Optional[List[bool]] = None, always_fail: bool = False):
        self.failures = list(failures or [])
        self.always_fail = always_fail
        self.calls: List[tuple] = []
        self.voices: List[Dict] = [
            {'ShortName': 'en-US-ChristopherNeural', 'FriendlyName': 'Christopher', 'Locale': 'en-US', 'Gender': 'Male'},
            {'ShortName': 'en-GB-SoniaNeural', 'FriendlyName': 'Sonia', 'Locale': 'en-GB', 'Gender': 'Female'},
        ]

    @staticmethod
    def audio_for(text: str) -> bytes:
        return f'<{text}>'.encode()

    async def synthesize(self, text: str, voice: str) -> bytes:
        self.calls.append((text, voice))
        fail = self.failures.pop(0) if self.failures else self.always_fail
        if fail:
            raise ProviderError('connection reset by provider (secret-detail-123)')
        # Hand control back to the loop like a real network stream
        await asyncio.sleep(0)
        return self.audio_for(text)

    async def list_voices(self) -> List[Dict]:
        return self.voices


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def artifact_dir(tmp_path):
    """Empty artifact directory."""
    path = tmp_path / 'public'
    path.mkdir()
    return path


@pytest.fixture
def artifacts(artifact_dir):
    return ArtifactManager(artifact_dir)


@pytest.fixture
def store():
    return JobStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return RecordingSleep()


@pytest.fixture
def fake_client():
    return FakeSynthesisClient()


@pytest.fixture
def synthesizer(fake_client, sleeps):
    return RetryingSynthesizer(fake_client, retry_delay=2.0, inter_segment_pause=0.05, sleep=sleeps)


@pytest.fixture
def processor(store, artifacts, fake_client, synthesizer, clock):
    return JobProcessor(
        store=store,
        artifacts=artifacts,
        client=fake_client,
        synthesizer=synthesizer,
        clock=clock,
    )


@pytest.fixture
def reclaimer(store, artifacts, clock):
    return Reclaimer(store, artifacts, ttl=timedelta(hours=1), interval=0.01, clock=clock)


@pytest_asyncio.fixture
async def client(processor, artifacts):
    """Create a test client with the processor and artifact manager injected."""
    # Reset singletons
    reset_job_processor()
    reset_job_store()
    reset_reclaimer()
    reset_artifact_manager()

    # Import app after resetting singletons
    from server import app

    app.dependency_overrides[get_job_processor] = lambda: processor
    app.dependency_overrides[get_artifact_manager] = lambda: artifacts

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as client:
        yield client

    await processor.drain()

    # Clean up
    app.dependency_overrides.clear()
    reset_job_processor()
    reset_job_store()
    reset_reclaimer()
    reset_artifact_manager()
