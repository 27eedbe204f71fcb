"""
Access Policy - role -> allowed actions

Single capability table consulted by every service before it touches
storage. ``can_perform`` is pure; ``require`` raises AuthorizationError.
"""

import enum
from typing import Dict, FrozenSet

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.exceptions import AuthorizationError, ProjectNotFoundError
from drawhub.models.project import Project, ProjectAssignment
from drawhub.models.user import User, UserRole


class Action(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_PROJECTS = "manage_projects"      # create/update projects, assignments
    REVIEW_FILES = "review_files"
    UPLOAD_FILES = "upload_files"
    VIEW_ALL = "view_all"                    # every project, global stats/activity
    VIEW_OWN = "view_own"                    # assigned projects, own activity
    MANAGE_SETTINGS = "manage_settings"


_EVERYONE = frozenset(UserRole)
_MANAGERS = frozenset({UserRole.ADMINISTRADOR, UserRole.GESTOR})

CAPABILITIES: Dict[Action, FrozenSet[UserRole]] = {
    Action.MANAGE_USERS: _MANAGERS,
    Action.MANAGE_PROJECTS: _MANAGERS,
    Action.REVIEW_FILES: _MANAGERS | {UserRole.GESTOR_FINAL},
    Action.UPLOAD_FILES: _EVERYONE,
    Action.VIEW_ALL: _MANAGERS,
    Action.VIEW_OWN: _EVERYONE,
    Action.MANAGE_SETTINGS: frozenset({UserRole.ADMINISTRADOR}),
}


def can_perform(role: UserRole, action: Action) -> bool:
    return UserRole(role) in CAPABILITIES.get(action, frozenset())


def require(user: User, action: Action) -> None:
    """Raise AuthorizationError unless the user's role grants ``action``"""
    if not can_perform(user.role, action):
        raise AuthorizationError(action=action.value)


async def is_assigned(db: AsyncSession, user_id: str, project_id: str) -> bool:
    result = await db.execute(
        select(ProjectAssignment.id).where(
            ProjectAssignment.project_id == project_id,
            ProjectAssignment.user_id == user_id,
        )
    )
    return result.first() is not None


async def can_view_project(db: AsyncSession, user: User, project_id: str) -> bool:
    if can_perform(user.role, Action.VIEW_ALL):
        return True
    return await is_assigned(db, user.id, project_id)


async def get_visible_project(db: AsyncSession, user: User, project_id: str) -> Project:
    """
    Load a project the user may see.

    Hidden projects raise ProjectNotFoundError, same as missing ones, so
    project ids are not disclosed to unassigned users.
    """
    project = await db.get(Project, project_id)
    if project is None or not await can_view_project(db, user, project_id):
        raise ProjectNotFoundError(project_id)
    return project
