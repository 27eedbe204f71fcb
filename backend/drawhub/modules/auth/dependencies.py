from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from drawhub.core.database import get_db
from drawhub.core.exceptions import AuthenticationError, InactiveUserError
from drawhub.core.logging_config import set_user_id
from drawhub.core.security import decode_token
from drawhub.models.session import UserSession
from drawhub.models.user import User

# auto_error=False so a missing header is a 401 (HTTPBearer alone answers 403)
security = HTTPBearer(auto_error=False)


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> UserSession:
    """Resolve the bearer token to an open login session"""
    if credentials is None:
        raise AuthenticationError(code="NOT_AUTHENTICATED")

    payload = decode_token(credentials.credentials)

    session = await db.get(UserSession, payload["sid"])
    if session is None or session.user_id != payload["sub"]:
        raise AuthenticationError(code="SESSION_NOT_FOUND")
    if not session.is_valid():
        raise AuthenticationError("Sessão expirada", code="SESSION_EXPIRED")

    return session


async def get_current_user(
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    user = await db.get(User, session.user_id)
    if user is None:
        raise AuthenticationError(code="USER_NOT_FOUND")
    if not user.is_active:
        raise InactiveUserError()

    # Set user context for downstream logging
    set_user_id(str(user.id))
    request.state.user_id = str(user.id)
    return user
