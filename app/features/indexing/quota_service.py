"""Daily URL quota lookup"""
import logging
from datetime import date
from typing import Optional

from app.core.errors import NotFoundError
from app.features.indexing.domain import UNLIMITED_QUOTA
from app.features.indexing.schemas import QuotaResponse
from app.infra.supabase.repositories import RepositoryFactory
from app.models.user_profile import UserProfileUpdate
from app.utils.datetime_helper import utc_now, utc_today

logger = logging.getLogger(__name__)


class QuotaService:
    def __init__(self, repos: RepositoryFactory):
        self.repos = repos

    async def get_quota(self, user_id: str, today: Optional[date] = None) -> QuotaResponse:
        """
        Current usage against the package's daily URL limit.

        Usage recorded on an earlier day is reset to 0 first. A limit of -1
        means unlimited, reported with remaining_quota -1.
        """
        today = today or utc_today()

        profile = await self.repos.user_profiles.find_by_user_id(user_id)
        if not profile:
            raise NotFoundError(f"Profile not found for user {user_id}", user_message="User profile not found")

        used = profile.daily_quota_used or 0
        if profile.daily_quota_reset_date is None:
            # Never reset before; the conditional update below cannot match NULL
            await self.repos.user_profiles.update_by_user_id(user_id, UserProfileUpdate(
                daily_quota_used=0,
                daily_quota_reset_date=today,
                updated_at=utc_now(),
            ))
            used = 0
        elif profile.daily_quota_reset_date < today:
            if await self.repos.user_profiles.reset_daily_quota_if_stale(user_id, today):
                logger.info(f"QuotaService: Reset daily quota for user {user_id}")
            used = 0

        package = await self.repos.packages.find_by_id(profile.package_id) if profile.package_id else None
        limit = package.daily_url_limit if package else 0
        is_unlimited = limit == UNLIMITED_QUOTA

        return QuotaResponse(
            user_id=user_id,
            package_id=profile.package_id,
            package_name=package.name if package else None,
            daily_quota_used=used,
            daily_quota_limit=limit,
            is_unlimited=is_unlimited,
            quota_exhausted=not is_unlimited and used >= limit,
            remaining_quota=UNLIMITED_QUOTA if is_unlimited else max(limit - used, 0),
        )
