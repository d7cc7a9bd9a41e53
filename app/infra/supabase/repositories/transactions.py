"""Payment transaction repository"""
import logging
from typing import Optional, Tuple

from supabase import Client  # type: ignore

from app.models.transaction import Transaction, TransactionCreate, TransactionUpdate

from .base import BaseRepository, escape_like

logger = logging.getLogger(__name__)


class TransactionRepository(BaseRepository[Transaction, TransactionCreate, TransactionUpdate]):
    """Repository for payment transaction operations"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_payment_transactions", Transaction)

    async def find_by_payment_reference(self, order_id: str) -> Optional[Transaction]:
        """Exact match on the order id we handed to the gateway"""
        return await self.find_one({"payment_reference": order_id})

    async def find_by_metadata_order_id(self, order_id: str) -> Optional[Transaction]:
        """Match transactions whose metadata records the gateway order id"""
        response = (
            self._table()
            .select("*")
            .contains("metadata", {"midtrans_order_id": order_id})
            .limit(1)
            .execute()
        )
        return self._to_model(response.data[0]) if response.data else None

    async def find_by_gateway_transaction_id_like(self, order_id: str) -> Optional[Transaction]:
        """Fuzzy match against gateway_transaction_id"""
        response = (
            self._table()
            .select("*")
            .ilike("gateway_transaction_id", f"%{escape_like(order_id)}%")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return self._to_model(response.data[0]) if response.data else None

    async def find_by_order_reference(self, order_id: str) -> Tuple[Optional[Transaction], Optional[str]]:
        """
        Locate the transaction a gateway notification refers to.

        Lookups run in a fixed order and stop at the first hit:
        payment_reference, then metadata.midtrans_order_id, then a fuzzy
        gateway_transaction_id match.

        Returns:
            (transaction, matched_by) where matched_by names the lookup that hit
        """
        lookups = (
            ("payment_reference", self.find_by_payment_reference),
            ("metadata", self.find_by_metadata_order_id),
            ("gateway_transaction_id", self.find_by_gateway_transaction_id_like),
        )
        for matched_by, lookup in lookups:
            transaction = await lookup(order_id)
            if transaction:
                return transaction, matched_by
        return None, None
