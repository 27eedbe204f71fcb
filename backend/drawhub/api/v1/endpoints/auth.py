from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from drawhub.core.config import settings
from drawhub.core.database import get_db
from drawhub.core.exceptions import InvalidCredentialsError, InactiveUserError
from drawhub.core.logging_config import logger, set_user_id
from drawhub.core.rate_limiter import limiter
from drawhub.core.security import verify_password, create_access_token
from drawhub.core.types import utcnow
from drawhub.models.activity_log import ActivityAction, EntityType
from drawhub.models.session import UserSession
from drawhub.models.user import User
from drawhub.modules.auth.dependencies import get_current_user, get_current_session
from drawhub.schemas.auth import LoginRequest, LoginResponse, MessageResponse
from drawhub.schemas.user import UserResponse
from drawhub.services.activity_recorder import ActivityRecorder

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login with corporate e-mail and password (rate limited)"""
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(
        select(User).where(func.lower(User.email) == credentials.email.lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise InvalidCredentialsError()

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise InactiveUserError()

    session = UserSession.open(
        user.id,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )
    db.add(session)
    user.last_login = utcnow()
    ActivityRecorder(db).record(
        user.id,
        ActivityAction.LOGIN,
        EntityType.USER,
        user.id,
        {"ip_address": client_ip},
    )
    await db.commit()

    # Set user context for downstream logging
    set_user_id(str(user.id))

    access_token = create_access_token({
        "sub": str(user.id),
        "sid": session.id,
        "role": user.role.value,
    })

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return LoginResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: UserSession = Depends(get_current_session),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """End the current login session"""
    session.close()
    ActivityRecorder(db).record(
        current_user.id,
        ActivityAction.LOGOUT,
        EntityType.USER,
        current_user.id,
    )
    await db.commit()

    logger.log_auth_event(event="logout", success=True, user_email=current_user.email)
    return MessageResponse(message="Logout realizado com sucesso")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return current_user
