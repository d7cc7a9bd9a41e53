"""Billing API endpoints: Midtrans webhook, recurring charge trigger, admin order review"""
import hmac
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request

from app import config
from app.api.dependencies import get_midtrans_client, get_repositories
from app.core.errors import ValidationError
from app.features.billing.admin_service import OrderStatusService
from app.features.billing.midtrans_client import MidtransClient
from app.features.billing.recurring_service import RecurringChargeService
from app.features.billing.schemas import (
    ProcessRecurringRequest,
    ProcessRecurringResponse,
    UpdateOrderStatusRequest,
    UpdateOrderStatusResponse,
    WebhookAck,
)
from app.features.billing.webhook_service import MidtransWebhookService
from app.infra.supabase.repositories import RepositoryFactory
from app.middleware.auth import require_admin
from app.models.user_profile import UserProfile
from app.utils.datetime_helper import ensure_aware

logger = logging.getLogger(__name__)

webhook_router = APIRouter(prefix="/api/v1/payments/midtrans", tags=["payments"])
recurring_router = APIRouter(prefix="/api/v1/billing", tags=["billing"])
admin_router = APIRouter(prefix="/api/v1/admin/orders", tags=["admin"])


# ============================================================================
# MIDTRANS WEBHOOK ENDPOINT
# ============================================================================

def parse_notification_body(raw: bytes, content_type: str) -> Dict[str, Any]:
    """
    Decode a notification body.

    JSON and form-encoded bodies are parsed by content type; anything else is
    tried as JSON first and then as a query string.
    """
    text = raw.decode("utf-8", errors="replace")

    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(text, keep_blank_values=True))

    try:
        body = json.loads(text) if text else {}
    except json.JSONDecodeError:
        if "application/json" in content_type:
            raise ValidationError("Malformed JSON notification body")
        return dict(parse_qsl(text, keep_blank_values=True))

    if not isinstance(body, dict):
        raise ValidationError("Notification body must be an object")
    return body


@webhook_router.post("/webhook", response_model=WebhookAck, response_model_exclude_none=True)
async def midtrans_webhook(
    request: Request,
    repos: RepositoryFactory = Depends(get_repositories),
    midtrans: MidtransClient = Depends(get_midtrans_client),
):
    """
    Midtrans HTTP notification endpoint

    Handles:
    - Payment notifications (capture, settlement, pending, deny, cancel, expire, failure)
    - Subscription lifecycle notifications (subscription.create/active/update/disable/enable)
    """
    payload = parse_notification_body(await request.body(), request.headers.get("content-type", ""))
    logger.info(f"Received Midtrans notification (keys: {sorted(payload.keys())})")

    service = MidtransWebhookService(repos, midtrans.server_key)
    return await service.handle_notification(payload)


@webhook_router.get("/webhook")
async def midtrans_webhook_check():
    """Endpoint verification (Midtrans dashboard 'test notification URL')"""
    return {"status": "ok", "message": "Webhook endpoint active"}


# ============================================================================
# RECURRING CHARGE TRIGGER (CRON)
# ============================================================================

def verify_cron_secret(x_cron_secret: Optional[str] = Header(None, alias="X-Cron-Secret")) -> None:
    if not config.CRON_SECRET or not x_cron_secret \
            or not hmac.compare_digest(x_cron_secret, config.CRON_SECRET):
        raise HTTPException(status_code=401, detail="Invalid cron secret")


@recurring_router.post(
    "/recurring/process",
    response_model=ProcessRecurringResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def process_recurring_charges(
    request: Optional[ProcessRecurringRequest] = Body(None),
    repos: RepositoryFactory = Depends(get_repositories),
    midtrans: MidtransClient = Depends(get_midtrans_client),
):
    """
    Charge every active recurring subscription whose next_billing_date has passed.

    Intended to be called by an external scheduler (e.g. hourly).
    """
    service = RecurringChargeService(repos, midtrans)
    before = ensure_aware(request.before) if request and request.before else None
    return await service.process_due_subscriptions(before)


# ============================================================================
# ADMIN ORDER REVIEW
# ============================================================================

@admin_router.patch("/{transaction_id}/status", response_model=UpdateOrderStatusResponse)
async def update_order_status(
    transaction_id: str,
    request: UpdateOrderStatusRequest,
    admin: UserProfile = Depends(require_admin),
    repos: RepositoryFactory = Depends(get_repositories),
):
    """
    Approve (completed) or reject (failed) a manual-payment order.

    Completed and failed orders are final. Approving activates the user's plan;
    if activation fails the order returns to proof_uploaded and 500 is returned.
    """
    service = OrderStatusService(repos)
    return await service.update_status(transaction_id, admin.user_id, request.status, request.notes)
