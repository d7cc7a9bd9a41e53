"""Midtrans-specific transaction record"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel


class MidtransTransactionBase(BaseModel):
    """Gateway copy of a settled payment"""
    transaction_id: Optional[str] = None
    order_id: str
    user_id: str
    package_id: Optional[str] = None
    amount: float
    currency: str = "IDR"
    transaction_status: str
    payment_type: Optional[str] = None
    fraud_status: Optional[str] = None
    bank: Optional[str] = None
    masked_card: Optional[str] = None
    card_type: Optional[str] = None
    billing_period: Optional[str] = None
    settlement_time: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class MidtransTransactionCreate(MidtransTransactionBase):
    pass


class MidtransTransactionUpdate(BaseModel):
    transaction_status: Optional[str] = None
    settlement_time: Optional[str] = None


class MidtransTransaction(MidtransTransactionBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
