from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from drawhub.core.database import get_db
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user
from drawhub.schemas.file import FileResponse, StatusUpdateRequest, UploadResponse
from drawhub.services.file_versioning import FileVersioningService, IncomingFile
from drawhub.services.review_service import ReviewService

router = APIRouter()


@router.get("/projects/{project_id}/files", response_model=List[FileResponse])
async def list_project_files(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Files of a project, newest first"""
    return await FileVersioningService(db).list_files(current_user, project_id)


@router.post("/projects/{project_id}/files", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_files(
    project_id: str,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload drawings (.dwg/.pdf) to a project.

    Each file is versioned and stored independently; files that fail
    validation are listed under ``rejected``. Fails with 400 only when no
    file was accepted.
    """
    incoming = [
        IncomingFile(filename=f.filename, source=f, content_type=f.content_type)
        for f in files
    ]
    try:
        outcome = await FileVersioningService(db).upload(current_user, project_id, incoming)
    finally:
        for f in files:
            await f.close()

    return UploadResponse(uploaded=outcome.uploaded, rejected=outcome.rejected)


@router.put("/files/{file_id}/status", response_model=FileResponse)
async def update_file_status(
    file_id: str,
    data: StatusUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Approve, reject or send a file back for revision"""
    outcome = await ReviewService(db).set_status(current_user, file_id, data.status, data.review_notes)
    return outcome.file
