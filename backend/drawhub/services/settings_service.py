"""
System settings stored in the database

The only setting the application itself reads is ``allowed_email_domains``
(JSON list of corporate domains accepted for new accounts); when it is not
set, DEFAULT_EMAIL_DOMAINS from the environment applies.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.config import settings
from drawhub.core.exceptions import ValidationError
from drawhub.core.logging_config import logger
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.system_setting import SystemSetting, ALLOWED_EMAIL_DOMAINS_KEY
from drawhub.models.user import User
from drawhub.services.access_policy import Action, require
from drawhub.services.activity_recorder import ActivityRecorder


def normalize_domains(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list) or not all(isinstance(d, str) for d in value):
        raise ValidationError("Lista de domínios inválida", field="value")
    domains = [d.strip().lower().lstrip("@") for d in value if d.strip()]
    if not domains:
        raise ValidationError("Informe ao menos um domínio", field="value")
    return domains


@dataclass
class SettingOutcome:
    setting: SystemSetting
    activity: ActivityLog


class SettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.recorder = ActivityRecorder(db)

    async def get(self, key: str) -> Optional[SystemSetting]:
        result = await self.db.execute(select(SystemSetting).where(SystemSetting.key == key))
        return result.scalar_one_or_none()

    async def list_settings(self, actor: User) -> List[SystemSetting]:
        require(actor, Action.MANAGE_SETTINGS)
        result = await self.db.execute(select(SystemSetting).order_by(SystemSetting.key))
        return list(result.scalars().all())

    async def email_domains(self) -> List[str]:
        """Effective list of corporate e-mail domains"""
        setting = await self.get(ALLOWED_EMAIL_DOMAINS_KEY)
        if setting is not None and setting.value:
            return [d.lower() for d in setting.value]
        return settings.DEFAULT_EMAIL_DOMAINS

    async def update(
        self,
        actor: User,
        key: str,
        value: Any,
        description: Optional[str] = None,
    ) -> SettingOutcome:
        """Create or replace a setting"""
        require(actor, Action.MANAGE_SETTINGS)

        if key == ALLOWED_EMAIL_DOMAINS_KEY:
            value = normalize_domains(value)

        setting = await self.get(key)
        if setting is None:
            setting = SystemSetting(key=key, value=value, description=description, updated_by=actor.id)
            self.db.add(setting)
        else:
            setting.value = value
            setting.updated_by = actor.id
            if description is not None:
                setting.description = description

        entry = self.recorder.record(
            actor.id,
            ActivityAction.UPDATE_SETTING,
            EntityType.SETTING,
            key,
            {"key": key, "value": value},
        )
        await self.db.commit()
        await self.db.refresh(setting)

        logger.log_domain_event(ActivityAction.UPDATE_SETTING.value, EntityType.SETTING.value, key)
        return SettingOutcome(setting=setting, activity=entry)
