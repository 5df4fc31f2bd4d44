"""
Voice endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from narrator.errors import MissingInput, PathTraversalRejected, ProviderError
from narrator.schemas.voice import (
    VoiceListResponse,
    VoicePreviewRequest,
    VoicePreviewResponse,
    VoiceResponse,
)
from narrator.services.job_processor import JobProcessor, get_job_processor


router = APIRouter(prefix='/voices', tags=['voices'])


@router.get('', response_model=VoiceListResponse)
async def list_voices(
    locale: Optional[str] = Query(default=None, description='Filter by locale, e.g. en-US'),
    processor: JobProcessor = Depends(get_job_processor),
) -> VoiceListResponse:
    """
    List voices offered by the speech provider.

    The catalogue is fetched once and cached for the life of the process.
    """
    try:
        voices = await processor.client.list_voices()
    except ProviderError:
        raise HTTPException(status_code=502, detail='Voice catalogue unavailable')

    if locale:
        voices = [v for v in voices if v.get('Locale', '').lower() == locale.lower()]

    return VoiceListResponse(
        voices=[
            VoiceResponse(
                id=v['ShortName'],
                display_name=v.get('FriendlyName', v['ShortName']),
                locale=v.get('Locale', ''),
                gender=v.get('Gender', ''),
            )
            for v in voices
        ]
    )


@router.post('/preview', response_model=VoicePreviewResponse)
async def preview_voice(
    request: VoicePreviewRequest,
    processor: JobProcessor = Depends(get_job_processor),
) -> VoicePreviewResponse:
    """
    Get a short sample of a voice.

    The sample is generated on first request and cached on disk.

    Raises:
        400: Voice missing or not a valid name
        502: Provider could not synthesize the sample
    """
    try:
        audio_url = await processor.preview_voice(request.voice)
    except (MissingInput, PathTraversalRejected) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError:
        raise HTTPException(status_code=502, detail='Failed to generate preview')

    return VoicePreviewResponse(audio_url=audio_url)
