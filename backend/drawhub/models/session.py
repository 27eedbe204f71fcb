from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Text
from datetime import timedelta

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


class UserSession(Base):
    """
    Server-side login session.

    The access token carries the session id (``sid``); logout flips
    ``is_active`` so the token stops working before it expires.
    """
    __tablename__ = "user_sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    # Device/browser info
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    ended_at = Column(DateTime, nullable=True)

    @classmethod
    def open(cls, user_id: str, minutes: int, ip_address: str = None, user_agent: str = None) -> "UserSession":
        return cls(
            id=generate_uuid(),
            user_id=user_id,
            is_active=True,
            expires_at=utcnow() + timedelta(minutes=minutes),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def is_expired(self) -> bool:
        return utcnow() > self.expires_at

    def is_valid(self) -> bool:
        return bool(self.is_active) and not self.is_expired()

    def close(self):
        self.is_active = False
        self.ended_at = utcnow()

    def __repr__(self):
        return f"<UserSession {self.id} user={self.user_id}>"
