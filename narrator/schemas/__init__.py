"""
Pydantic schemas for API request/response validation.
"""
from narrator.schemas.job import JobCreate, JobResponse, JobResultResponse
from narrator.schemas.voice import (
    VoiceListResponse,
    VoicePreviewRequest,
    VoicePreviewResponse,
    VoiceResponse,
)

__all__ = [
    'JobCreate',
    'JobResponse',
    'JobResultResponse',
    'VoiceResponse',
    'VoiceListResponse',
    'VoicePreviewRequest',
    'VoicePreviewResponse',
]
