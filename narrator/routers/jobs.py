"""
Job endpoints for script-to-audio generation.
"""
from fastapi import APIRouter, Depends, HTTPException

from narrator.errors import JobNotFound, MissingInput
from narrator.schemas.job import JobCreate, JobResponse
from narrator.services.job_processor import JobProcessor, get_job_processor


router = APIRouter(prefix='/jobs', tags=['jobs'])


@router.post('', response_model=JobResponse, status_code=201)
async def create_job(
    job_data: JobCreate,
    processor: JobProcessor = Depends(get_job_processor),
) -> JobResponse:
    """
    Submit a script for narration.

    Returns immediately with the job ID and pending status.
    The job is processed asynchronously in the background; poll
    GET /jobs/{id} until it is completed or failed.
    """
    try:
        job_id = processor.submit(job_data.text, job_data.voice)
    except MissingInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JobResponse.model_validate(processor.query_status(job_id))


@router.get('/{job_id}', response_model=JobResponse)
async def get_job(
    job_id: str,
    processor: JobProcessor = Depends(get_job_processor),
) -> JobResponse:
    """
    Get status, progress and result for a job.

    Jobs expire an hour after submission; a 404 for a job that was seen
    before means it expired.
    """
    try:
        job = processor.query_status(job_id)
    except JobNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return JobResponse.model_validate(job)


@router.delete('/{job_id}', status_code=204)
async def delete_job(
    job_id: str,
    processor: JobProcessor = Depends(get_job_processor),
):
    """
    Delete a job and its generated audio file.
    """
    try:
        await processor.delete_job(job_id)
    except JobNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
