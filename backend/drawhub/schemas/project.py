from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from drawhub.models.project import ProjectPriority, ProjectStatus
from drawhub.schemas.user import UserSummary


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: ProjectPriority = ProjectPriority.MEDIA
    status: ProjectStatus = ProjectStatus.PLANEJAMENTO
    assigned_user_ids: List[str] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[ProjectPriority] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    priority: ProjectPriority
    status: ProjectStatus
    created_by_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AssignmentRequest(BaseModel):
    user_id: str


class AssignmentResponse(BaseModel):
    project_id: str
    user: UserSummary
    assigned_at: datetime
