"""
User Service - account administration

Accounts are created and edited by administrators/managers only. Users are
never deleted; ``is_active=False`` deactivates them.
"""

from dataclasses import dataclass
from typing import List

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.exceptions import DuplicateEmailError, UserNotFoundError, ValidationError
from drawhub.core.logging_config import logger
from drawhub.core.security import get_password_hash
from drawhub.core.types import generate_uuid
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.user import User
from drawhub.schemas.auth import email_domain
from drawhub.schemas.user import UserCreate, UserUpdate
from drawhub.services.access_policy import Action, require
from drawhub.services.activity_recorder import ActivityRecorder
from drawhub.services.settings_service import SettingsService


@dataclass
class UserOutcome:
    user: User
    activity: ActivityLog


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.recorder = ActivityRecorder(db)

    async def get_by_email(self, email: str):
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def _check_domain(self, email: str) -> None:
        allowed = await SettingsService(self.db).email_domains()
        if email_domain(email) not in allowed:
            raise ValidationError(
                f"E-mail deve pertencer a um domínio corporativo: {', '.join(allowed)}",
                field="email",
            )

    async def _commit_unique_email(self, email: str) -> None:
        """Commit, turning a lost race on the e-mail unique index into DuplicateEmailError"""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Concurrent registration of {email}")
            raise DuplicateEmailError(email)

    async def list_users(self, actor: User, include_inactive: bool = False) -> List[User]:
        """Users ordered by name; only active ones unless asked otherwise"""
        require(actor, Action.MANAGE_USERS)
        query = select(User).order_by(User.name)
        if not include_inactive:
            query = query.where(User.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_user(self, actor: User, data: UserCreate) -> UserOutcome:
        require(actor, Action.MANAGE_USERS)

        email = data.email.lower()
        await self._check_domain(email)
        if await self.get_by_email(email):
            raise DuplicateEmailError(email)

        user = User(
            id=generate_uuid(),
            name=data.name.strip(),
            email=email,
            hashed_password=get_password_hash(data.password),
            role=data.role,
            is_active=True,
        )
        self.db.add(user)
        entry = self.recorder.record(
            actor.id,
            ActivityAction.CREATE_USER,
            EntityType.USER,
            user.id,
            {"created_user_email": email, "created_user_role": data.role.value},
        )
        await self._commit_unique_email(email)
        await self.db.refresh(user)

        logger.log_domain_event(ActivityAction.CREATE_USER.value, EntityType.USER.value, user.id)
        return UserOutcome(user=user, activity=entry)

    async def update_user(self, actor: User, user_id: str, data: UserUpdate) -> UserOutcome:
        """Partial update; the password is re-hashed only when supplied"""
        require(actor, Action.MANAGE_USERS)

        user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        changes = data.model_dump(exclude_unset=True)
        updated_fields = []

        if changes.get("email") is not None:
            email = changes["email"].lower()
            if email != user.email:
                await self._check_domain(email)
                if await self.get_by_email(email):
                    raise DuplicateEmailError(email)
                user.email = email
                updated_fields.append("email")

        if changes.get("password"):
            user.hashed_password = get_password_hash(changes["password"])
            updated_fields.append("password")

        for field in ("name", "role", "is_active"):
            if changes.get(field) is not None:
                setattr(user, field, changes[field])
                updated_fields.append(field)

        entry = self.recorder.record(
            actor.id,
            ActivityAction.UPDATE_USER,
            EntityType.USER,
            user.id,
            {"updated_fields": updated_fields},
        )
        await self._commit_unique_email(user.email)
        await self.db.refresh(user)

        logger.log_domain_event(ActivityAction.UPDATE_USER.value, EntityType.USER.value, user.id)
        return UserOutcome(user=user, activity=entry)
