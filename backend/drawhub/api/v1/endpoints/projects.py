from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from drawhub.core.database import get_db
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user
from drawhub.schemas.auth import MessageResponse
from drawhub.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    AssignmentRequest,
    AssignmentResponse,
)
from drawhub.schemas.user import UserSummary
from drawhub.services.project_service import ProjectService

router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Visible projects, most recently updated first"""
    return await ProjectService(db).list_projects(current_user)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await ProjectService(db).create_project(current_user, data)
    return outcome.project


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProjectService(db).get_project(current_user, project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await ProjectService(db).update_project(current_user, project_id, data)
    return outcome.project


# ==================== ASSIGNMENTS ====================

def _assignment_response(assignment, user: User) -> AssignmentResponse:
    return AssignmentResponse(
        project_id=assignment.project_id,
        user=UserSummary.model_validate(user),
        assigned_at=assignment.assigned_at,
    )


@router.get("/{project_id}/assignments", response_model=List[AssignmentResponse])
async def list_assignments(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    rows = await ProjectService(db).list_assignments(current_user, project_id)
    return [_assignment_response(assignment, user) for assignment, user in rows]


@router.post("/{project_id}/assignments", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_user(
    project_id: str,
    data: AssignmentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Assign a user to the project (no-op if already assigned)"""
    service = ProjectService(db)
    outcome = await service.assign_user(current_user, project_id, data.user_id)
    user = await db.get(User, data.user_id)
    return _assignment_response(outcome.assignment, user)


@router.delete("/{project_id}/assignments/{user_id}", response_model=MessageResponse)
async def unassign_user(
    project_id: str,
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ProjectService(db).unassign_user(current_user, project_id, user_id)
    return MessageResponse(message="Usuário removido do projeto")
