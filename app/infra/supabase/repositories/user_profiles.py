"""User profile repository"""
from datetime import date, datetime, timezone
from typing import Optional

from supabase import Client  # type: ignore

from app.models.user_profile import UserProfile, UserProfileCreate, UserProfileUpdate

from .base import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile, UserProfileCreate, UserProfileUpdate]):
    """Repository for user profile operations (profiles are keyed by user_id)"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_auth_user_profiles", UserProfile)

    async def find_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        return await self.find_one({"user_id": user_id})

    async def update_by_user_id(self, user_id: str, data: UserProfileUpdate) -> Optional[UserProfile]:
        updated = await self.update_by_filters({"user_id": user_id}, data)
        if updated is None:
            return await self.find_by_user_id(user_id)
        return updated[0] if updated else None

    async def reset_daily_quota_if_stale(self, user_id: str, today: date) -> bool:
        """Zero daily_quota_used when the last reset happened before today

        Returns True if a reset was written.
        """
        payload = UserProfileUpdate(
            daily_quota_used=0,
            daily_quota_reset_date=today,
            updated_at=datetime.now(timezone.utc),
        ).model_dump(exclude_unset=True, mode='json')

        response = (
            self._table()
            .update(payload)
            .eq("user_id", user_id)
            .lt("daily_quota_reset_date", today.isoformat())
            .execute()
        )
        return bool(response.data)
