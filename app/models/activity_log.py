"""Activity log model"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel


class ActivityLogCreate(BaseModel):
    user_id: str
    event_type: str
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    success: bool = True


class ActivityLogUpdate(BaseModel):
    details: Optional[Dict[str, Any]] = None


class ActivityLog(ActivityLogCreate):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
