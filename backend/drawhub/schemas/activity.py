from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime


class ActivityResponse(BaseModel):
    id: str
    user_id: str
    user_name: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_users: int
    total_projects: int
    total_files: int
    approved_files: int
    approval_rate: int  # percent, 0-100
