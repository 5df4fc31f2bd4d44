"""
Pydantic schemas for Voice API operations.
"""
from typing import List
from pydantic import BaseModel, Field


class VoiceResponse(BaseModel):
    """Schema for a provider voice."""
    id: str
    display_name: str
    locale: str
    gender: str


class VoiceListResponse(BaseModel):
    """Schema for voice list response."""
    voices: List[VoiceResponse]


class VoicePreviewRequest(BaseModel):
    """Schema for requesting a voice sample."""
    voice: str = Field(..., description='Provider voice name')


class VoicePreviewResponse(BaseModel):
    """Schema for voice preview response."""
    audio_url: str
