"""Request and response schemas for Billing feature"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from app.features.billing.domain import AdminOrderDecision
from app.models.transaction import Transaction


class WebhookAck(BaseModel):
    """Acknowledgement returned to the payment gateway"""
    status: str = "OK"
    message: Optional[str] = None
    subscription_id: Optional[str] = None


class UpdateOrderStatusRequest(BaseModel):
    """Admin decision on a manual-payment order"""
    status: AdminOrderDecision
    notes: Optional[str] = Field(None, max_length=2000)


class UpdateOrderStatusResponse(BaseModel):
    success: bool
    message: str
    transaction: Transaction


class ProcessRecurringRequest(BaseModel):
    """Optional override of the cut-off used to select due subscriptions"""
    model_config = ConfigDict(populate_by_name=True)

    before: Optional[datetime] = None


class RecurringChargeError(BaseModel):
    subscription_id: str
    error: str


class ProcessRecurringResponse(BaseModel):
    status: str
    batch_size: int = 0
    processed_count: int = 0
    failed_count: int = 0
    errors: List[RecurringChargeError] = []
    message: Optional[str] = None


class SubscriptionEventInfo(BaseModel):
    """Subset of a Midtrans subscription lifecycle notification"""
    model_config = ConfigDict(extra="allow")

    id: str
    status: Optional[str] = None
    amount: Optional[Any] = None
    currency: Optional[str] = None
    metadata: Dict[str, Any] = {}
