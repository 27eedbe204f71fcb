from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


# Well-known keys
ALLOWED_EMAIL_DOMAINS_KEY = "allowed_email_domains"


class SystemSetting(Base):
    """Administrator-managed configuration stored in the database"""
    __tablename__ = "system_settings"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(JSON, nullable=False)
    description = Column(Text, nullable=True)

    # Audit trail
    updated_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<SystemSetting {self.key}>"
