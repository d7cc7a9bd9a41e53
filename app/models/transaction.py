"""Payment transaction domain model"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel


class TransactionBase(BaseModel):
    """Base transaction fields"""
    user_id: str   # UUID as string
    package_id: Optional[str] = None
    gateway_id: Optional[str] = None
    transaction_status: str = "pending"
    amount: float = 0
    currency: str = "IDR"
    payment_reference: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    billing_period: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class TransactionCreate(TransactionBase):
    """Transaction creation model"""
    processed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    gateway_response: Optional[Dict[str, Any]] = None


class TransactionUpdate(BaseModel):
    """Transaction update model - all fields optional"""
    transaction_status: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    notes: Optional[str] = None
    gateway_response: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None


class Transaction(TransactionBase):
    """Complete transaction model from database"""
    id: str
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    notes: Optional[str] = None
    gateway_response: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
