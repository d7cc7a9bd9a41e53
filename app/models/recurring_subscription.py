"""Recurring subscription domain model"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel


class RecurringSubscriptionBase(BaseModel):
    """Base recurring subscription fields"""
    subscription_id: str
    user_id: str
    package_id: Optional[str] = None
    transaction_id: Optional[str] = None
    status: str = "active"
    billing_period: str = "monthly"
    amount: float = 0
    currency: str = "IDR"
    card_token: Optional[str] = None
    customer_details: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class RecurringSubscriptionCreate(RecurringSubscriptionBase):
    """Recurring subscription creation model"""
    started_at: datetime
    next_billing_date: datetime
    expires_at: datetime


class RecurringSubscriptionUpdate(BaseModel):
    """Recurring subscription update model - all fields optional"""
    status: Optional[str] = None
    next_billing_date: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    updated_at: Optional[datetime] = None


class RecurringSubscription(RecurringSubscriptionBase):
    """Complete recurring subscription model from database"""
    id: str
    started_at: Optional[datetime] = None
    next_billing_date: datetime
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
