"""
Recurring Charge Service

Renews due recurring subscriptions by charging the saved card token:
- Finding active subscriptions whose next_billing_date has passed
- Charging each one through the Midtrans Core API
- Advancing billing dates and recording a completed transaction on success
- Marking the subscription payment_failed when the charge is declined or errors
- Flagging a charge that succeeded but could not be recorded, for manual repair

Subscriptions are processed one at a time. Every subscription ends up counted
as either processed or failed, so the two counts always add up to the batch size.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.features.billing.domain import RecurringStatus, TransactionStatus, is_successful_charge
from app.features.billing.midtrans_client import MidtransClient
from app.features.billing.service import SubscriptionService
from app.infra.supabase.repositories import RepositoryFactory
from app.models.recurring_subscription import RecurringSubscription, RecurringSubscriptionUpdate
from app.models.transaction import TransactionCreate
from app.utils.billing_period import add_billing_period
from app.utils.datetime_helper import epoch_millis, utc_now

logger = logging.getLogger(__name__)

# Guards against overlapping runs inside one process (not across instances)
_run_lock = asyncio.Lock()


class ChargeDeclinedError(Exception):
    """The charge was not taken, either declined or the request itself failed"""


class UnrecordedChargeError(Exception):
    """The card was charged but the renewal could not be written"""

    def __init__(
        self,
        message: str,
        order_id: str,
        gateway_transaction_id: Optional[str],
        next_billing_date: datetime,
        expires_at: datetime,
    ):
        super().__init__(message)
        self.order_id = order_id
        self.gateway_transaction_id = gateway_transaction_id
        self.next_billing_date = next_billing_date
        self.expires_at = expires_at


class RecurringChargeService:
    """Service for processing recurring subscription renewals"""

    def __init__(self, repos: RepositoryFactory, midtrans: MidtransClient):
        self.repos = repos
        self.midtrans = midtrans
        self.subscriptions = SubscriptionService(repos)

    async def process_due_subscriptions(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Charge every active subscription that is due at `now`.

        Args:
            now: Cut-off for next_billing_date (defaults to the current time)

        Returns:
            {"status", "batch_size", "processed_count", "failed_count", "errors"};
            {"status": "skipped"} when another run is already in progress
        """
        if _run_lock.locked():
            logger.warning("RecurringChargeService: A run is already in progress, skipping")
            return {
                "status": "skipped",
                "message": "Recurring charge run already in progress",
                "batch_size": 0,
                "processed_count": 0,
                "failed_count": 0,
                "errors": [],
            }

        async with _run_lock:
            return await self._run(now or utc_now())

    async def _run(self, now: datetime) -> Dict[str, Any]:
        due = await self.repos.recurring_subscriptions.find_due(now)
        logger.info(f"RecurringChargeService: Found {len(due)} subscriptions due at {now.isoformat()}")

        processed_count = 0
        failed_count = 0
        errors: List[Dict[str, str]] = []

        for subscription in due:
            try:
                await self._renew(subscription, now)
                processed_count += 1
                logger.info(f"RecurringChargeService: Renewed subscription {subscription.subscription_id}")
                continue
            except ChargeDeclinedError as e:
                reason = str(e)
                logger.error(f"RecurringChargeService: Charge failed for {subscription.subscription_id}: {reason}")
                await self._mark_payment_failed(subscription, reason, now)
            except UnrecordedChargeError as e:
                reason = str(e)
                logger.error(
                    f"RecurringChargeService: {subscription.subscription_id} was charged "
                    f"(order {e.order_id}) but the renewal was not recorded: {reason}"
                )
                await self._flag_unrecorded_charge(subscription, e, now)
            except Exception as e:
                reason = str(e)
                logger.error(
                    f"RecurringChargeService: Renewal of {subscription.subscription_id} failed before charging: {reason}",
                    exc_info=True,
                )

            failed_count += 1
            errors.append({"subscription_id": subscription.subscription_id, "error": reason})

        logger.info(
            f"RecurringChargeService: Run completed: {processed_count} processed, "
            f"{failed_count} failed of {len(due)}"
        )

        return {
            "status": "ok",
            "batch_size": len(due),
            "processed_count": processed_count,
            "failed_count": failed_count,
            "errors": errors,
        }

    async def _renew(self, subscription: RecurringSubscription, now: datetime) -> None:
        if not subscription.card_token:
            raise ChargeDeclinedError("No saved card token on subscription")

        # Never move dates backwards when a run is late
        next_billing_date = add_billing_period(max(subscription.next_billing_date, now), subscription.billing_period)
        expires_at = add_billing_period(max(subscription.expires_at or now, now), subscription.billing_period)

        order_id = f"RENEW-{subscription.subscription_id}-{epoch_millis(now)}"
        try:
            response = await self.midtrans.charge_saved_card(
                order_id=order_id,
                gross_amount=subscription.amount,
                token_id=subscription.card_token,
                customer_details=subscription.customer_details,
            )
        except Exception as e:
            raise ChargeDeclinedError(str(e)) from e

        if not is_successful_charge(response.get("transaction_status"), response.get("fraud_status")):
            raise ChargeDeclinedError(
                response.get("status_message")
                or f"Charge not captured (transaction_status={response.get('transaction_status')})"
            )

        try:
            await self._record_renewal(subscription, response, order_id, next_billing_date, expires_at, now)
        except Exception as e:
            raise UnrecordedChargeError(
                str(e), order_id, response.get("transaction_id"), next_billing_date, expires_at
            ) from e

        try:
            await self.subscriptions.extend_expiry(subscription.user_id, expires_at)
        except Exception:
            logger.error(
                f"RecurringChargeService: Charged {subscription.subscription_id} but failed to extend profile expiry",
                exc_info=True,
            )

    async def _record_renewal(
        self,
        subscription: RecurringSubscription,
        response: Dict[str, Any],
        order_id: str,
        next_billing_date: datetime,
        expires_at: datetime,
        now: datetime,
    ) -> None:
        await self.repos.recurring_subscriptions.update(
            subscription.id,
            RecurringSubscriptionUpdate(
                next_billing_date=next_billing_date,
                expires_at=expires_at,
                metadata={
                    **(subscription.metadata or {}),
                    "last_charge_order_id": order_id,
                    "last_charged_at": now.isoformat(),
                },
                updated_at=now,
            ),
        )

        await self.repos.transactions.create(TransactionCreate(
            user_id=subscription.user_id,
            package_id=subscription.package_id,
            transaction_status=TransactionStatus.COMPLETED.value,
            amount=subscription.amount,
            currency=subscription.currency,
            payment_reference=order_id,
            gateway_transaction_id=response.get("transaction_id"),
            billing_period=subscription.billing_period,
            processed_at=now,
            verified_at=now,
            metadata={
                "recurring_subscription_id": subscription.subscription_id,
                "midtrans_order_id": order_id,
            },
            gateway_response={"charge": response},
        ))

    async def _flag_unrecorded_charge(
        self,
        subscription: RecurringSubscription,
        error: UnrecordedChargeError,
        now: datetime,
    ) -> None:
        """
        Leave the charge details on the subscription for manual repair.

        The status is not touched. The dates still move forward so the next
        run does not charge the same period again.
        """
        try:
            await self.repos.recurring_subscriptions.update(
                subscription.id,
                RecurringSubscriptionUpdate(
                    next_billing_date=error.next_billing_date,
                    expires_at=error.expires_at,
                    metadata={
                        **(subscription.metadata or {}),
                        "unrecorded_charge": {
                            "order_id": error.order_id,
                            "gateway_transaction_id": error.gateway_transaction_id,
                            "charged_at": now.isoformat(),
                            "error": str(error),
                        },
                    },
                    updated_at=now,
                ),
            )
        except Exception:
            logger.error(
                f"RecurringChargeService: Could not flag unrecorded charge {error.order_id} "
                f"on {subscription.subscription_id}",
                exc_info=True,
            )

    async def _mark_payment_failed(self, subscription: RecurringSubscription, reason: str, now: datetime) -> None:
        try:
            await self.repos.recurring_subscriptions.update(
                subscription.id,
                RecurringSubscriptionUpdate(
                    status=RecurringStatus.PAYMENT_FAILED.value,
                    metadata={
                        **(subscription.metadata or {}),
                        "last_failure_reason": reason,
                        "last_failure_at": now.isoformat(),
                    },
                    updated_at=now,
                ),
            )
        except Exception:
            logger.error(
                f"RecurringChargeService: Could not mark {subscription.subscription_id} as payment_failed",
                exc_info=True,
            )
