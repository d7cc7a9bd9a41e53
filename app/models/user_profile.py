"""User profile domain model

The profile row doubles as the user's subscription entitlement: the active
package, when it started and when it expires, plus the daily quota counter.
"""
from datetime import datetime, date
from typing import Optional
from pydantic import BaseModel


class UserProfileBase(BaseModel):
    """Base user profile fields"""
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str = "user"


class UserProfileCreate(UserProfileBase):
    """User profile creation model"""
    user_id: str  # UUID as string


class UserProfileUpdate(BaseModel):
    """User profile update model"""
    package_id: Optional[str] = None
    subscribed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    daily_quota_used: Optional[int] = None
    daily_quota_reset_date: Optional[date] = None
    updated_at: Optional[datetime] = None


class UserProfile(UserProfileBase):
    """Complete user profile model from database"""
    user_id: str  # UUID as string
    package_id: Optional[str] = None
    subscribed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    daily_quota_used: int = 0
    daily_quota_reset_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_admin(self) -> bool:
        return self.role in ("admin", "super_admin")
