"""
Health check endpoint.
"""
from typing import Dict
from pydantic import BaseModel
from fastapi import APIRouter, Depends

from narrator.config import APP_VERSION, DEFAULT_VOICE
from narrator.services.job_processor import JobProcessor, get_job_processor


router = APIRouter(tags=['health'])


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    version: str
    default_voice: str
    active_jobs: int
    jobs: Dict[str, int]


@router.get('/health', response_model=HealthResponse)
async def health_check(processor: JobProcessor = Depends(get_job_processor)) -> HealthResponse:
    """
    Check server health status.

    Returns server version and job counts by status.
    Fast response - never calls the speech provider.
    """
    return HealthResponse(
        status='ok',
        version=APP_VERSION,
        default_voice=DEFAULT_VOICE,
        active_jobs=processor.active_tasks,
        jobs=processor.store.count_by_status(),
    )
