"""Webhook service for reconciling Midtrans payment notifications

A notification is trusted only after its SHA-512 signature is recomputed with
our server key. Once trusted, the matching transaction is moved to the mapped
internal status and, on completion, the user's entitlement is extended.

The follow-up writes on completion (profile, gateway record, recurring
subscription, activity log) are independent: each failure is logged and the
remaining steps still run. Nothing is rolled back.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from app.core.errors import InternalError, NotFoundError, ValidationError
from app.features.billing.domain import TransactionStatus, TERMINAL_STATUSES, map_gateway_status
from app.features.billing.schemas import SubscriptionEventInfo, WebhookAck
from app.features.billing.service import SubscriptionService, resolve_billing_period
from app.features.billing.signature import verify_signature
from app.infra.supabase.repositories import RepositoryFactory
from app.models.midtrans_transaction import MidtransTransactionCreate
from app.models.recurring_subscription import RecurringSubscriptionCreate
from app.models.transaction import Transaction, TransactionUpdate
from app.services.activity_logger import ActivityLogger
from app.utils.billing_period import add_billing_period
from app.utils.datetime_helper import epoch_millis, utc_now

logger = logging.getLogger(__name__)


class MidtransWebhookService:
    """Service for handling Midtrans payment and subscription notifications"""

    def __init__(self, repos: RepositoryFactory, server_key: Optional[str]):
        self.repos = repos
        self.server_key = server_key
        self.subscriptions = SubscriptionService(repos)
        self.activity = ActivityLogger(repos.activity_logs)

    async def handle_notification(self, payload: Dict[str, Any]) -> WebhookAck:
        """
        Route a notification body to the matching handler

        A signed body is always verified first, whatever its shape. Unsigned
        subscription events are acknowledged without any write.

        Args:
            payload: Parsed notification body

        Returns:
            Acknowledgement for the gateway

        Raises:
            ValidationError: Bad signature or missing order id (400)
            NotFoundError: No transaction matches the order id (404)
            InternalError: No server key configured (500)
        """
        if payload.get("subscription") and payload.get("event_name"):
            signed = bool(payload.get("signature_key"))
            if signed:
                self._verify(payload)
            return await self.handle_subscription_event(payload, verified=signed)

        return await self.handle_payment_notification(payload)

    def _verify(self, payload: Dict[str, Any]) -> None:
        if not self.server_key:
            raise InternalError("Midtrans server key is not configured")

        if not verify_signature(payload, self.server_key):
            logger.warning(f"MidtransWebhookService: Invalid signature for order {payload.get('order_id')}")
            raise ValidationError("Webhook signature mismatch", user_message="Invalid signature")

    async def handle_payment_notification(self, payload: Dict[str, Any]) -> WebhookAck:
        self._verify(payload)
        order_id = payload.get("order_id")

        logger.info(
            f"MidtransWebhookService: Notification for order {order_id}: "
            f"transaction_status={payload.get('transaction_status')} fraud_status={payload.get('fraud_status')}"
        )

        transaction, matched_by = await self.repos.transactions.find_by_order_reference(str(order_id))
        if not transaction:
            logger.error(f"MidtransWebhookService: Transaction not found for order {order_id}")
            raise NotFoundError(f"No transaction for order {order_id}", user_message="Transaction not found")

        logger.info(f"MidtransWebhookService: Order {order_id} matched transaction {transaction.id} by {matched_by}")

        new_status = map_gateway_status(payload.get("transaction_status"), payload.get("fraud_status"))
        if new_status is None:
            logger.warning(
                f"MidtransWebhookService: Unmapped transaction_status '{payload.get('transaction_status')}' "
                f"for order {order_id}, leaving transaction {transaction.id} unchanged"
            )
            return WebhookAck()

        # Retried or late notifications for a settled transaction are acknowledged only
        if transaction.transaction_status in {s.value for s in TERMINAL_STATUSES}:
            logger.warning(
                f"MidtransWebhookService: Transaction {transaction.id} already {transaction.transaction_status}, "
                f"ignoring transition to {new_status.value}"
            )
            return WebhookAck()

        now = utc_now()
        await self._update_transaction(transaction, new_status, payload, now)

        if new_status == TransactionStatus.COMPLETED:
            await self._on_payment_completed(transaction, payload, now)

        return WebhookAck()

    async def _update_transaction(
        self,
        transaction: Transaction,
        new_status: TransactionStatus,
        payload: Dict[str, Any],
        now: datetime,
    ) -> None:
        fields: Dict[str, Any] = {
            "transaction_status": new_status.value,
            "updated_at": now,
            "gateway_response": {
                **(transaction.gateway_response or {}),
                "webhook_data": payload,
                "updated_at": now.isoformat(),
                "payment_type": payload.get("payment_type"),
            },
        }
        if new_status in TERMINAL_STATUSES:
            fields["processed_at"] = now
        if new_status == TransactionStatus.COMPLETED:
            fields["verified_at"] = now

        await self.repos.transactions.update(transaction.id, TransactionUpdate(**fields))
        logger.info(
            f"MidtransWebhookService: Transaction {transaction.id} "
            f"'{transaction.transaction_status}' -> '{new_status.value}'"
        )

    async def _on_payment_completed(self, transaction: Transaction, payload: Dict[str, Any], now: datetime) -> None:
        billing_period = resolve_billing_period(transaction)
        expires_at = add_billing_period(now, billing_period)

        try:
            await self.subscriptions.activate_plan(
                transaction.user_id,
                transaction.package_id,
                billing_period,
                now=now,
            )
        except Exception:
            logger.error(
                f"MidtransWebhookService: Failed to activate plan for user {transaction.user_id}",
                exc_info=True,
            )

        try:
            await self._record_gateway_transaction(transaction, payload, billing_period)
        except Exception:
            logger.error(
                f"MidtransWebhookService: Failed to store gateway record for order {payload.get('order_id')}",
                exc_info=True,
            )

        if payload.get("saved_token_id"):
            try:
                await self._create_recurring_subscription(transaction, payload, billing_period, now, expires_at)
            except Exception:
                logger.error(
                    f"MidtransWebhookService: Failed to create recurring subscription for order {payload.get('order_id')}",
                    exc_info=True,
                )

        await self.activity.log(
            transaction.user_id,
            event_type="payment_completed",
            action=f"Payment completed for order {payload.get('order_id')}",
            resource_type="transaction",
            resource_id=transaction.id,
            details={
                "billing_period": billing_period,
                "expires_at": expires_at.isoformat(),
                "gross_amount": payload.get("gross_amount"),
            },
        )

    async def _record_gateway_transaction(
        self,
        transaction: Transaction,
        payload: Dict[str, Any],
        billing_period: str,
    ) -> None:
        va_numbers = payload.get("va_numbers") or [{}]
        record = MidtransTransactionCreate(
            transaction_id=payload.get("transaction_id"),
            order_id=str(payload.get("order_id")),
            user_id=transaction.user_id,
            package_id=transaction.package_id,
            amount=float(payload.get("gross_amount")),
            currency=payload.get("currency") or "IDR",
            transaction_status=payload.get("transaction_status"),
            payment_type=payload.get("payment_type"),
            fraud_status=payload.get("fraud_status"),
            bank=va_numbers[0].get("bank") or payload.get("bank"),
            masked_card=payload.get("masked_card"),
            card_type=payload.get("card_type"),
            billing_period=billing_period,
            settlement_time=payload.get("settlement_time"),
            metadata={
                "webhook_data": payload,
                "original_metadata": transaction.metadata,
            },
        )
        await self.repos.midtrans_transactions.create(record)

    async def _create_recurring_subscription(
        self,
        transaction: Transaction,
        payload: Dict[str, Any],
        billing_period: str,
        now: datetime,
        expires_at: datetime,
    ) -> None:
        order_id = payload.get("order_id")
        customer_info = (transaction.metadata or {}).get("customer_info") or {}
        subscription = RecurringSubscriptionCreate(
            subscription_id=f"SUB-{order_id}-{epoch_millis(now)}",
            user_id=transaction.user_id,
            package_id=transaction.package_id,
            transaction_id=transaction.id,
            status="active",
            billing_period=billing_period,
            amount=float(payload.get("gross_amount")),
            currency=payload.get("currency") or "IDR",
            started_at=now,
            next_billing_date=expires_at,
            expires_at=expires_at,
            card_token=payload.get("saved_token_id"),
            customer_details={
                "first_name": customer_info.get("first_name"),
                "last_name": customer_info.get("last_name"),
                "email": customer_info.get("email"),
                "phone": customer_info.get("phone"),
            },
            metadata={
                "auto_renewal": True,
                "subscription_type": "recurring",
                "source_order_id": order_id,
            },
        )
        created = await self.repos.recurring_subscriptions.create(subscription)
        logger.info(f"MidtransWebhookService: Recurring subscription {created.subscription_id} created")

    async def handle_subscription_event(self, payload: Dict[str, Any], verified: bool = False) -> WebhookAck:
        """
        Acknowledge a subscription lifecycle notification (create/active/update/disable/enable)

        No billing state changes. Only a verified event is written to the
        activity log of the owning user.
        """
        event_name = payload.get("event_name")
        subscription = SubscriptionEventInfo.model_validate(payload["subscription"])
        user_id = subscription.metadata.get("user_id")

        logger.info(
            f"MidtransWebhookService: Subscription event {event_name} for {subscription.id} "
            f"(status={subscription.status})"
        )

        if not verified:
            logger.warning(
                f"MidtransWebhookService: Unsigned subscription event {event_name} for {subscription.id}, not logged"
            )
        elif user_id:
            await self.activity.log(
                user_id,
                event_type="subscription_updated",
                action=f"Subscription {event_name} - ID: {subscription.id}",
                resource_type="subscription",
                resource_id=subscription.id,
                details={
                    "event_type": event_name,
                    "subscription_status": subscription.status,
                    "amount": subscription.amount,
                    "currency": subscription.currency,
                },
            )

        return WebhookAck(
            status="OK",
            message=f"Subscription event {event_name} processed successfully",
            subscription_id=subscription.id,
        )
