# Re-export all models for convenient imports
from drawhub.models.user import User, UserRole
from drawhub.models.session import UserSession
from drawhub.models.project import Project, ProjectAssignment, ProjectPriority, ProjectStatus
from drawhub.models.file_record import FileRecord, FileStatus
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.system_setting import SystemSetting, ALLOWED_EMAIL_DOMAINS_KEY

__all__ = [
    # User
    "User",
    "UserRole",
    "UserSession",
    # Project
    "Project",
    "ProjectAssignment",
    "ProjectPriority",
    "ProjectStatus",
    # Files
    "FileRecord",
    "FileStatus",
    # Activity
    "ActivityLog",
    "ActivityAction",
    "EntityType",
    # Admin
    "SystemSetting",
    "ALLOWED_EMAIL_DOMAINS_KEY",
]
