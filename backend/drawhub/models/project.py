from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, Index, UniqueConstraint
import enum

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


class ProjectPriority(str, enum.Enum):
    """Project priority"""
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"
    CRITICA = "critica"


class ProjectStatus(str, enum.Enum):
    """Project status"""
    PLANEJAMENTO = "planejamento"
    EM_ANDAMENTO = "em_andamento"
    AGUARDANDO_REVISAO = "aguardando_revisao"
    APROVADO = "aprovado"
    CANCELADO = "cancelado"


class Project(Base):
    """Engineering project that groups uploaded drawings"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_status', 'status'),
        Index('ix_projects_updated_at', 'updated_at'),  # Listing order
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(SQLEnum(ProjectPriority), default=ProjectPriority.MEDIA, nullable=False)
    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.PLANEJAMENTO, nullable=False)

    created_by_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Project {self.name}>"


class ProjectAssignment(Base):
    """Grants a user visibility into a project (many-to-many link)"""
    __tablename__ = "project_assignments"

    __table_args__ = (
        UniqueConstraint('project_id', 'user_id', name='uq_project_assignments_project_user'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ProjectAssignment project={self.project_id} user={self.user_id}>"
