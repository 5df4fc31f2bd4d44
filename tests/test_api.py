"""
API layer tests for job, download, voice and preview endpoints.
"""
import pytest

from narrator.services.artifacts import ArtifactKind


class TestJobEndpoints:
    """Tests for /jobs endpoints."""

    @pytest.mark.asyncio
    async def test_create_job_returns_pending(self, client):
        """Test POST /jobs creates job with pending status."""
        response = await client.post('/jobs', json={'text': 'Hello world.'})

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'pending'
        assert data['progress'] == 0
        assert data['result'] is None
        assert data['error'] is None
        assert 'id' in data

    @pytest.mark.asyncio
    async def test_create_job_with_voice(self, client):
        """Test POST /jobs accepts a voice."""
        response = await client.post('/jobs', json={
            'text': 'Hello world.',
            'voice': 'en-GB-SoniaNeural',
        })

        assert response.status_code == 201
        assert response.json()['voice'] == 'en-GB-SoniaNeural'

    @pytest.mark.asyncio
    async def test_create_job_requires_text(self, client):
        """Test POST /jobs requires text field."""
        response = await client.post('/jobs', json={})

        assert response.status_code == 422  # Validation error

    @pytest.mark.asyncio
    async def test_create_job_rejects_empty_text(self, client):
        response = await client.post('/jobs', json={'text': ''})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_job_rejects_blank_text(self, client, processor):
        response = await client.post('/jobs', json={'text': '   '})

        assert response.status_code == 400
        assert len(processor.store) == 0

    @pytest.mark.asyncio
    async def test_job_completes_and_is_pollable(self, client, processor):
        create_response = await client.post('/jobs', json={'text': 'Hello there. How are you?'})
        job_id = create_response.json()['id']

        await processor.drain()
        response = await client.get(f'/jobs/{job_id}')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'completed'
        assert data['progress'] == 100
        assert data['error'] is None
        assert data['result']['filename'] == f'audio-{job_id}.mp3'
        assert data['result']['audio_url'] == f'/files/audio-{job_id}.mp3'
        assert isinstance(data['result']['duration_estimate'], float)

    @pytest.mark.asyncio
    async def test_failed_job_hides_provider_detail(self, client, processor, fake_client):
        fake_client.always_fail = True

        create_response = await client.post('/jobs', json={'text': 'Hello.'})
        job_id = create_response.json()['id']
        await processor.drain()

        data = (await client.get(f'/jobs/{job_id}')).json()
        assert data['status'] == 'failed'
        assert data['result'] is None
        assert 'secret-detail' not in data['error']

    @pytest.mark.asyncio
    async def test_get_job_not_found(self, client):
        """Test GET /jobs/{id} returns 404 for invalid ID."""
        response = await client.get('/jobs/nonexistent-id')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_single_job(self, client, processor):
        """Test DELETE /jobs/{id} removes job."""
        create_response = await client.post('/jobs', json={'text': 'Test job.'})
        job_id = create_response.json()['id']
        await processor.drain()

        delete_response = await client.delete(f'/jobs/{job_id}')
        assert delete_response.status_code == 204

        get_response = await client.get(f'/jobs/{job_id}')
        assert get_response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_job_not_found(self, client):
        response = await client.delete('/jobs/nonexistent-id')

        assert response.status_code == 404


class TestDownloadEndpoint:
    """Tests for /download/{filename}."""

    @pytest.mark.asyncio
    async def test_download_generated_audio(self, client, processor):
        create_response = await client.post('/jobs', json={'text': 'Hello.'})
        job_id = create_response.json()['id']
        await processor.drain()

        response = await client.get(f'/download/audio-{job_id}.mp3')

        assert response.status_code == 200
        assert response.headers['content-type'] == 'audio/mpeg'
        assert 'attachment' in response.headers['content-disposition']
        assert response.content == b'<Hello.>'

    @pytest.mark.asyncio
    async def test_download_missing_file(self, client):
        response = await client.get('/download/audio-expired.mp3')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_download_rejects_traversal(self, client, artifacts, artifact_dir):
        # The file exists, but the name is still refused
        (artifact_dir / 'audio-..mp3').write_bytes(b'x')

        response = await client.get('/download/audio-..mp3')

        assert response.status_code == 400


class TestVoiceEndpoints:
    """Tests for /voices endpoints."""

    @pytest.mark.asyncio
    async def test_list_voices(self, client):
        response = await client.get('/voices')

        assert response.status_code == 200
        voices = response.json()['voices']
        assert [v['id'] for v in voices] == ['en-US-ChristopherNeural', 'en-GB-SoniaNeural']
        assert voices[0]['display_name'] == 'Christopher'

    @pytest.mark.asyncio
    async def test_list_voices_by_locale(self, client):
        response = await client.get('/voices', params={'locale': 'en-gb'})

        assert [v['id'] for v in response.json()['voices']] == ['en-GB-SoniaNeural']

    @pytest.mark.asyncio
    async def test_preview_voice(self, client, artifacts):
        response = await client.post('/voices/preview', json={'voice': 'en-US-AriaNeural'})

        assert response.status_code == 200
        assert response.json() == {'audio_url': '/files/preview-en-US-AriaNeural.mp3'}
        assert artifacts.exists(ArtifactKind.preview, 'en-US-AriaNeural')

    @pytest.mark.asyncio
    async def test_preview_is_cached(self, client, fake_client):
        await client.post('/voices/preview', json={'voice': 'en-US-AriaNeural'})
        await client.post('/voices/preview', json={'voice': 'en-US-AriaNeural'})

        assert len(fake_client.calls) == 1

    @pytest.mark.asyncio
    async def test_preview_requires_voice(self, client):
        response = await client.post('/voices/preview', json={'voice': ''})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_preview_rejects_path_voice(self, client, fake_client):
        response = await client.post('/voices/preview', json={'voice': '../../etc/passwd'})

        assert response.status_code == 400
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_preview_provider_failure(self, client, fake_client):
        fake_client.always_fail = True

        response = await client.post('/voices/preview', json={'voice': 'en-US-AriaNeural'})

        assert response.status_code == 502
        assert 'secret-detail' not in response.text
