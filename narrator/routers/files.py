"""
Artifact download endpoint.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from narrator.config import AUDIO_MEDIA_TYPE
from narrator.errors import ArtifactNotFound, PathTraversalRejected
from narrator.services.artifacts import ArtifactManager, get_artifact_manager


router = APIRouter(tags=['files'])


@router.get('/download/{filename}')
async def download_file(
    filename: str,
    artifacts: ArtifactManager = Depends(get_artifact_manager),
):
    """
    Download generated audio or a voice preview as an attachment.

    Raises:
        400: Filename contains a path traversal sequence
        404: File not found or expired
    """
    try:
        path = artifacts.resolve(filename)
    except PathTraversalRejected as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ArtifactNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return FileResponse(
        path=str(path),
        media_type=AUDIO_MEDIA_TYPE,
        filename=filename,
    )
