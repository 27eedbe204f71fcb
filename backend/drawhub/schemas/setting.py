from pydantic import BaseModel, ConfigDict
from typing import Optional, Any, List
from datetime import datetime


class SettingUpdate(BaseModel):
    value: Any
    description: Optional[str] = None


class SettingResponse(BaseModel):
    key: str
    value: Any
    description: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EmailDomainsResponse(BaseModel):
    domains: List[str]
