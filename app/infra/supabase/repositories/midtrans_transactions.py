"""Midtrans transaction record repository"""
from supabase import Client  # type: ignore

from app.models.midtrans_transaction import (
    MidtransTransaction,
    MidtransTransactionCreate,
    MidtransTransactionUpdate,
)

from .base import BaseRepository


class MidtransTransactionRepository(
    BaseRepository[MidtransTransaction, MidtransTransactionCreate, MidtransTransactionUpdate]
):
    """Repository for the gateway-specific copy of settled payments"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_payment_midtrans_transactions", MidtransTransaction)
