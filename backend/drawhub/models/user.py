from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
import enum

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


class UserRole(str, enum.Enum):
    """User roles (closed set; capabilities live in services.access_policy)"""
    ADMINISTRADOR = "administrador"
    GESTOR = "gestor"
    ESPECIALISTA = "especialista"
    ANALISTA = "analista"
    PROJETISTA = "projetista"
    GESTOR_FINAL = "gestor_final"


class User(Base):
    """
    Corporate user account.

    Accounts are created by administrators/managers and never deleted;
    ``is_active=False`` is the soft delete.
    """
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else '-'})>"
