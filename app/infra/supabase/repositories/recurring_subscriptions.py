"""Recurring subscription repository"""
from datetime import datetime
from typing import List, Optional

from supabase import Client  # type: ignore

from app.models.recurring_subscription import (
    RecurringSubscription,
    RecurringSubscriptionCreate,
    RecurringSubscriptionUpdate,
)

from .base import BaseRepository


class RecurringSubscriptionRepository(
    BaseRepository[RecurringSubscription, RecurringSubscriptionCreate, RecurringSubscriptionUpdate]
):
    """Repository for recurring subscription operations"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_payment_midtrans_subscriptions", RecurringSubscription)

    async def find_due(self, before: datetime) -> List[RecurringSubscription]:
        """Find active subscriptions whose next_billing_date is at or before `before`"""
        response = (
            self._table()
            .select("*")
            .eq("status", "active")
            .lte("next_billing_date", before.isoformat())
            .order("next_billing_date")
            .execute()
        )
        return self._to_models(response.data or [])

    async def find_by_subscription_id(self, subscription_id: str) -> Optional[RecurringSubscription]:
        return await self.find_one({"subscription_id": subscription_id})
