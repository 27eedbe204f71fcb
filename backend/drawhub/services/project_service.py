"""
Project Service - projects and user assignments

Administrators and managers see and edit every project; everyone else sees
only the projects they are assigned to.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.exceptions import ProjectNotFoundError, UserNotFoundError, ValidationError
from drawhub.core.logging_config import logger
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.project import Project, ProjectAssignment
from drawhub.models.user import User
from drawhub.schemas.project import ProjectCreate, ProjectUpdate
from drawhub.services.access_policy import Action, can_perform, require, get_visible_project
from drawhub.services.activity_recorder import ActivityRecorder


@dataclass
class ProjectOutcome:
    project: Project
    activity: ActivityLog


@dataclass
class AssignmentOutcome:
    assignment: ProjectAssignment
    created: bool
    activity: Optional[ActivityLog] = None


class ProjectService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.recorder = ActivityRecorder(db)

    async def list_projects(self, actor: User) -> List[Project]:
        """Visible projects, most recently updated first"""
        require(actor, Action.VIEW_OWN)
        query = select(Project).order_by(Project.updated_at.desc())
        if not can_perform(actor.role, Action.VIEW_ALL):
            query = query.join(ProjectAssignment, ProjectAssignment.project_id == Project.id).where(
                ProjectAssignment.user_id == actor.id
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_project(self, actor: User, project_id: str) -> Project:
        require(actor, Action.VIEW_OWN)
        return await get_visible_project(self.db, actor, project_id)

    async def _load_users(self, user_ids: Sequence[str]) -> List[User]:
        unique_ids = list(dict.fromkeys(user_ids))
        if not unique_ids:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(unique_ids)))
        users = list(result.scalars().all())
        missing = set(unique_ids) - {u.id for u in users}
        if missing:
            raise UserNotFoundError(sorted(missing)[0])
        for user in users:
            self._check_assignable(user)
        return users

    @staticmethod
    def _check_assignable(user: User) -> None:
        if not user.is_active:
            raise ValidationError("Usuário inativo não pode ser atribuído", field="user_id")

    async def create_project(self, actor: User, data: ProjectCreate) -> ProjectOutcome:
        """Create a project and assign the given users to it in one commit"""
        require(actor, Action.MANAGE_PROJECTS)

        users = await self._load_users(data.assigned_user_ids)

        project = Project(
            name=data.name.strip(),
            description=data.description,
            priority=data.priority,
            status=data.status,
            created_by_id=actor.id,
        )
        self.db.add(project)
        await self.db.flush()

        for user in users:
            self.db.add(ProjectAssignment(project_id=project.id, user_id=user.id))

        entry = self.recorder.record(
            actor.id,
            ActivityAction.CREATE_PROJECT,
            EntityType.PROJECT,
            project.id,
            {"project_name": project.name, "assigned_users": [u.id for u in users]},
        )
        await self.db.commit()
        await self.db.refresh(project)

        logger.log_domain_event(ActivityAction.CREATE_PROJECT.value, EntityType.PROJECT.value, project.id)
        return ProjectOutcome(project=project, activity=entry)

    async def update_project(self, actor: User, project_id: str, data: ProjectUpdate) -> ProjectOutcome:
        require(actor, Action.MANAGE_PROJECTS)

        project = await self.db.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        for field, value in changes.items():
            setattr(project, field, value)

        details = {"updated_fields": sorted(changes)}
        if "status" in changes:
            details["status"] = changes["status"].value

        entry = self.recorder.record(
            actor.id,
            ActivityAction.UPDATE_PROJECT,
            EntityType.PROJECT,
            project.id,
            details,
        )
        await self.db.commit()
        await self.db.refresh(project)

        logger.log_domain_event(ActivityAction.UPDATE_PROJECT.value, EntityType.PROJECT.value, project.id)
        return ProjectOutcome(project=project, activity=entry)

    # ==================== ASSIGNMENTS ====================

    async def list_assignments(self, actor: User, project_id: str) -> List[Tuple[ProjectAssignment, User]]:
        """Assigned users of a visible project, by name"""
        await self.get_project(actor, project_id)
        result = await self.db.execute(
            select(ProjectAssignment, User)
            .join(User, User.id == ProjectAssignment.user_id)
            .where(ProjectAssignment.project_id == project_id)
            .order_by(User.name)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def _get_assignment(self, project_id: str, user_id: str) -> Optional[ProjectAssignment]:
        result = await self.db.execute(
            select(ProjectAssignment).where(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def assign_user(self, actor: User, project_id: str, user_id: str) -> AssignmentOutcome:
        """Assign a user to a project; assigning twice is a no-op"""
        require(actor, Action.MANAGE_PROJECTS)

        if await self.db.get(Project, project_id) is None:
            raise ProjectNotFoundError(project_id)
        user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        self._check_assignable(user)

        existing = await self._get_assignment(project_id, user_id)
        if existing is not None:
            return AssignmentOutcome(assignment=existing, created=False)

        assignment = ProjectAssignment(project_id=project_id, user_id=user_id)
        self.db.add(assignment)
        entry = self.recorder.record(
            actor.id,
            ActivityAction.ASSIGN_USER,
            EntityType.PROJECT,
            project_id,
            {"user_id": user_id, "user_email": user.email},
        )
        try:
            await self.db.commit()
        except IntegrityError:
            # Assigned concurrently by another request
            await self.db.rollback()
            existing = await self._get_assignment(project_id, user_id)
            if existing is None:
                raise
            return AssignmentOutcome(assignment=existing, created=False)
        await self.db.refresh(assignment)

        logger.log_domain_event(ActivityAction.ASSIGN_USER.value, EntityType.PROJECT.value, project_id, assigned_user=user_id)
        return AssignmentOutcome(assignment=assignment, created=True, activity=entry)

    async def unassign_user(self, actor: User, project_id: str, user_id: str) -> ActivityLog:
        require(actor, Action.MANAGE_PROJECTS)

        if await self.db.get(Project, project_id) is None:
            raise ProjectNotFoundError(project_id)
        assignment = await self._get_assignment(project_id, user_id)
        if assignment is None:
            raise UserNotFoundError(user_id)

        await self.db.delete(assignment)
        entry = self.recorder.record(
            actor.id,
            ActivityAction.UNASSIGN_USER,
            EntityType.PROJECT,
            project_id,
            {"user_id": user_id},
        )
        await self.db.commit()

        logger.log_domain_event(ActivityAction.UNASSIGN_USER.value, EntityType.PROJECT.value, project_id, unassigned_user=user_id)
        return entry
