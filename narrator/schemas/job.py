"""
Pydantic schemas for Job API operations.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from narrator.models.job import JobStatus


class JobCreate(BaseModel):
    """Schema for submitting a script for synthesis."""
    text: str = Field(..., min_length=1, description='The script to narrate')
    voice: Optional[str] = Field(None, description='Provider voice name (null = default voice)')


class JobResultResponse(BaseModel):
    """Descriptor of a completed job's audio."""
    model_config = ConfigDict(from_attributes=True)

    filename: str
    audio_url: str
    duration_estimate: float  # minutes


class JobResponse(BaseModel):
    """Schema for job status response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: JobStatus
    progress: int
    voice: str
    created_at: datetime
    completed_at: Optional[datetime]
    result: Optional[JobResultResponse]
    error: Optional[str]
