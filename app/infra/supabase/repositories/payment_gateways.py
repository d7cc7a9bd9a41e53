"""Payment gateway repository"""
from typing import Optional

from pydantic import BaseModel
from supabase import Client  # type: ignore

from app.models.payment_gateway import PaymentGateway

from .base import BaseRepository


class PaymentGatewayRepository(BaseRepository[PaymentGateway, BaseModel, BaseModel]):
    """Repository for payment gateway configuration"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_payment_gateways", PaymentGateway)

    async def find_active_by_slug(self, slug: str) -> Optional[PaymentGateway]:
        """Find the active gateway configured under a slug (e.g. 'midtrans')"""
        return await self.find_one({"slug": slug, "is_active": True})
