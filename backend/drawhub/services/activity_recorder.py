"""
Activity Recorder - append-only activity log and dashboard aggregation

``ActivityRecorder.record`` adds the entry to the caller's session without
committing, so the entry lands in the same transaction as the change it
documents. Reads are newest first.
"""

from typing import Optional, Dict, Any, List, Sequence, Tuple

from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.config import settings
from drawhub.core.types import generate_uuid, utcnow
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.file_record import FileRecord, FileStatus
from drawhub.models.project import Project, ProjectAssignment
from drawhub.models.user import User
from drawhub.schemas.activity import DashboardStats
from drawhub.services.access_policy import Action, can_perform


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.ACTIVITY_DEFAULT_LIMIT
    return max(1, min(int(limit), settings.ACTIVITY_MAX_LIMIT))


def approval_rate(approved: int, total: int) -> int:
    """Percentage of approved files, rounded half up; 0 without files"""
    if total <= 0:
        return 0
    return int(100 * approved / total + 0.5)


class ActivityRecorder:
    """Writes activity entries into the caller's unit of work"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        user_id: str,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        entry = ActivityLog(
            id=generate_uuid(),
            user_id=user_id,
            action=ActivityAction(action).value,
            entity_type=EntityType(entity_type).value,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details,
            created_at=utcnow(),
        )
        self.db.add(entry)
        return entry

    async def _fetch(self, limit: Optional[int], user_id: Optional[str] = None) -> List[Tuple[ActivityLog, Optional[str]]]:
        query = (
            select(ActivityLog, User.name)
            .outerjoin(User, User.id == ActivityLog.user_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(clamp_limit(limit))
        )
        if user_id is not None:
            query = query.where(ActivityLog.user_id == user_id)
        result = await self.db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def recent_activity(self, limit: Optional[int] = None) -> List[Tuple[ActivityLog, Optional[str]]]:
        """Latest entries of every user, with the author's name"""
        return await self._fetch(limit)

    async def activity_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Tuple[ActivityLog, Optional[str]]]:
        return await self._fetch(limit, user_id=user_id)

    async def activity_visible_to(self, user: User, limit: Optional[int] = None) -> List[Tuple[ActivityLog, Optional[str]]]:
        if can_perform(user.role, Action.VIEW_ALL):
            return await self.recent_activity(limit)
        return await self.activity_for_user(user.id, limit)


class DashboardService:
    """Role-scoped counters for the dashboard"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _assigned_project_ids(self, user_id: str) -> Sequence[str]:
        result = await self.db.execute(
            select(ProjectAssignment.project_id).where(ProjectAssignment.user_id == user_id)
        )
        return result.scalars().all()

    async def stats_for(self, user: User) -> DashboardStats:
        if can_perform(user.role, Action.VIEW_ALL):
            users_q = select(func.count(User.id)).where(User.is_active.is_(True))
            projects_q = select(func.count(Project.id))
            files_q = select(func.count(FileRecord.id))
            approved_q = select(func.count(FileRecord.id)).where(FileRecord.status == FileStatus.APROVADO)
        else:
            project_ids = list(await self._assigned_project_ids(user.id))
            users_q = (
                select(func.count(distinct(User.id)))
                .join(ProjectAssignment, ProjectAssignment.user_id == User.id)
                .where(ProjectAssignment.project_id.in_(project_ids), User.is_active.is_(True))
            )
            projects_q = select(func.count(Project.id)).where(Project.id.in_(project_ids))
            files_q = select(func.count(FileRecord.id)).where(FileRecord.project_id.in_(project_ids))
            approved_q = select(func.count(FileRecord.id)).where(
                FileRecord.project_id.in_(project_ids),
                FileRecord.status == FileStatus.APROVADO,
            )

        total_users = (await self.db.execute(users_q)).scalar() or 0
        total_projects = (await self.db.execute(projects_q)).scalar() or 0
        total_files = (await self.db.execute(files_q)).scalar() or 0
        approved = (await self.db.execute(approved_q)).scalar() or 0

        return DashboardStats(
            total_users=total_users,
            total_projects=total_projects,
            total_files=total_files,
            approved_files=approved,
            approval_rate=approval_rate(approved, total_files),
        )
