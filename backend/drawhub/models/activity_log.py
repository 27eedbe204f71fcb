from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Index, event
import enum

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


class ActivityAction(str, enum.Enum):
    """Action tags written to the activity log"""
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    ASSIGN_USER = "assign_user"
    UNASSIGN_USER = "unassign_user"
    UPLOAD_FILE = "upload_file"
    REVIEW_FILE = "review_file"
    UPDATE_SETTING = "update_setting"


class EntityType(str, enum.Enum):
    """Kinds of entity an activity entry points at"""
    USER = "user"
    PROJECT = "project"
    FILE = "file"
    SETTING = "setting"


class ActivityLog(Base):
    """Append-only record of one state-changing action"""
    __tablename__ = "activity_log"

    __table_args__ = (
        Index('ix_activity_log_user_created', 'user_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    # Action details
    action = Column(String(100), nullable=False)      # ActivityAction value
    entity_type = Column(String(50), nullable=False)  # EntityType value
    entity_id = Column(String(100), nullable=True)

    # Structured context (file name, version, changed fields, ...)
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action} by {self.user_id}>"


@event.listens_for(ActivityLog, "before_update")
def _forbid_update(mapper, connection, target):
    raise RuntimeError("activity log entries are immutable")


@event.listens_for(ActivityLog, "before_delete")
def _forbid_delete(mapper, connection, target):
    raise RuntimeError("activity log entries cannot be deleted")
