from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from drawhub.core.database import get_db
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user
from drawhub.schemas.setting import SettingResponse, SettingUpdate, EmailDomainsResponse
from drawhub.services.access_policy import Action, require
from drawhub.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=List[SettingResponse])
async def list_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await SettingsService(db).list_settings(current_user)


@router.get("/email-domains", response_model=EmailDomainsResponse)
async def get_email_domains(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Corporate domains accepted for new accounts"""
    require(current_user, Action.MANAGE_USERS)
    return EmailDomainsResponse(domains=await SettingsService(db).email_domains())


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    data: SettingUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await SettingsService(db).update(current_user, key, data.value, data.description)
    return outcome.setting
