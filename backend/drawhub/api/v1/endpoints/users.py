from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from drawhub.core.database import get_db
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user
from drawhub.schemas.user import UserCreate, UserUpdate, UserResponse
from drawhub.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    include_inactive: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List users (administrators and managers)"""
    return await UserService(db).list_users(current_user, include_inactive=include_inactive)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await UserService(db).create_user(current_user, data)
    return outcome.user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    outcome = await UserService(db).update_user(current_user, user_id, data)
    return outcome.user
