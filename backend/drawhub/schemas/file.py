from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from drawhub.models.file_record import FileStatus


class FileResponse(BaseModel):
    id: str
    project_id: str
    name: str
    original_name: str
    version: int
    size: int
    mime_type: str
    status: FileStatus
    uploaded_by_id: str
    uploaded_at: datetime
    reviewed_by_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RejectedFile(BaseModel):
    """A file of an upload batch that was refused"""
    filename: str
    code: str
    message: str


class UploadResponse(BaseModel):
    uploaded: List[FileResponse]
    rejected: List[RejectedFile] = Field(default_factory=list)


class StatusUpdateRequest(BaseModel):
    status: FileStatus
    review_notes: Optional[str] = None
