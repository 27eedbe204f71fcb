from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from drawhub.core.database import get_db
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user
from drawhub.schemas.activity import ActivityResponse, DashboardStats
from drawhub.services.activity_recorder import ActivityRecorder, DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Counters for the dashboard, scoped to the caller's projects unless they can view all"""
    return await DashboardService(db).stats_for(current_user)


@router.get("/activity", response_model=List[ActivityResponse])
async def get_activity(
    limit: Optional[int] = Query(None, description="Entries to return (clamped to ACTIVITY_MAX_LIMIT)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Latest activity: everyone's for administrators/managers, own otherwise"""
    rows = await ActivityRecorder(db).activity_visible_to(current_user, limit)
    return [
        ActivityResponse(
            id=entry.id,
            user_id=entry.user_id,
            user_name=user_name,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            details=entry.details,
            created_at=entry.created_at,
        )
        for entry, user_name in rows
    ]
