"""Subscription entitlement service

Writes the user's plan entitlement (package, subscribed_at, expires_at) onto
the profile row. Shared by gateway reconciliation, admin approval and
recurring renewals.
"""
import logging
from datetime import datetime
from typing import Optional

from app.core.errors import BusinessLogicError, DatabaseError
from app.infra.supabase.repositories import RepositoryFactory
from app.models.transaction import Transaction
from app.models.user_profile import UserProfile, UserProfileUpdate
from app.utils.billing_period import add_billing_period, normalize_billing_period
from app.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)


def resolve_billing_period(transaction: Transaction) -> str:
    """transaction.billing_period, then metadata.billing_period, then monthly"""
    period = transaction.billing_period or (transaction.metadata or {}).get("billing_period")
    return normalize_billing_period(period)


class SubscriptionService:
    """Service for activating and extending plan entitlements"""

    def __init__(self, repos: RepositoryFactory):
        self.repos = repos

    async def activate_plan(
        self,
        user_id: str,
        package_id: Optional[str],
        billing_period: str,
        now: Optional[datetime] = None,
        reset_quota: bool = False,
    ) -> UserProfile:
        """
        Give a user a package for one billing period starting now.

        Args:
            user_id: Profile owner
            package_id: Package being activated
            billing_period: weekly / monthly / quarterly / annual
            now: Period start (defaults to the current time)
            reset_quota: Also zero today's quota usage (admin approvals)

        Returns:
            The updated profile

        Raises:
            BusinessLogicError: Package missing or unknown
            DatabaseError: Profile row not found or not updated
        """
        now = now or utc_now()

        if not package_id:
            raise BusinessLogicError("Transaction has no package to activate")

        package = await self.repos.packages.find_by_id(package_id)
        if not package:
            raise BusinessLogicError(f"Package {package_id} not found")

        expires_at = add_billing_period(now, billing_period)
        fields = {
            "package_id": package_id,
            "subscribed_at": now,
            "expires_at": expires_at,
            "updated_at": now,
        }
        if reset_quota:
            fields["daily_quota_used"] = 0
            fields["daily_quota_reset_date"] = now.date()

        profile = await self.repos.user_profiles.update_by_user_id(user_id, UserProfileUpdate(**fields))
        if not profile:
            raise DatabaseError(f"User profile {user_id} not found for plan activation")

        logger.info(
            f"SubscriptionService: Activated package {package.name} ({billing_period}) "
            f"for user {user_id} until {expires_at.isoformat()}"
        )
        return profile

    async def extend_expiry(self, user_id: str, expires_at: datetime) -> Optional[UserProfile]:
        """Move a profile's expires_at forward; an earlier value is ignored"""
        profile = await self.repos.user_profiles.find_by_user_id(user_id)
        if not profile:
            raise DatabaseError(f"User profile {user_id} not found")

        if profile.expires_at and profile.expires_at >= expires_at:
            logger.info(f"SubscriptionService: expires_at for {user_id} already at {profile.expires_at}, not moving back")
            return profile

        return await self.repos.user_profiles.update_by_user_id(
            user_id,
            UserProfileUpdate(expires_at=expires_at, updated_at=utc_now()),
        )
