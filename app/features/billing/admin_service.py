"""Admin order review service

Admins approve or reject manual-payment orders. Approval activates the plan;
if activation fails the order is put back to proof_uploaded so it can be
reviewed again.
"""
import logging
from typing import Optional

from app.core.errors import AppError, BusinessLogicError, ErrorType, NotFoundError
from app.features.billing.domain import AdminOrderDecision, TransactionStatus, TERMINAL_STATUSES
from app.features.billing.schemas import UpdateOrderStatusResponse
from app.features.billing.service import SubscriptionService, resolve_billing_period
from app.infra.supabase.repositories import RepositoryFactory
from app.models.transaction import Transaction, TransactionUpdate
from app.services.activity_logger import ActivityLogger
from app.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)


class OrderStatusService:
    """Service for admin decisions on payment orders"""

    def __init__(self, repos: RepositoryFactory):
        self.repos = repos
        self.subscriptions = SubscriptionService(repos)
        self.activity = ActivityLogger(repos.activity_logs)

    async def update_status(
        self,
        transaction_id: str,
        admin_user_id: str,
        decision: AdminOrderDecision,
        notes: Optional[str] = None,
    ) -> UpdateOrderStatusResponse:
        """
        Approve (completed) or reject (failed) an order.

        Raises:
            NotFoundError: Transaction does not exist
            BusinessLogicError: Transaction is already completed or failed
            AppError: Plan activation failed after approval (500, order rolled back)
        """
        current = await self.repos.transactions.find_by_id(transaction_id)
        if not current:
            raise NotFoundError(f"Transaction {transaction_id} not found", user_message="Transaction not found")

        if current.transaction_status in {s.value for s in TERMINAL_STATUSES}:
            raise BusinessLogicError(
                f"Transaction {transaction_id} is already {current.transaction_status}",
                user_message="Cannot update transactions that are already completed or failed",
            )

        now = utc_now()
        approved = decision == AdminOrderDecision.COMPLETED
        updated = await self.repos.transactions.update(transaction_id, TransactionUpdate(
            transaction_status=decision.value,
            verified_by=admin_user_id,
            verified_at=now,
            processed_at=now if approved else None,
            notes=notes or None,
            updated_at=now,
        ))
        if not updated:
            raise AppError(
                f"Failed to update transaction {transaction_id}",
                error_type=ErrorType.DATABASE,
                user_message="Failed to update transaction status",
            )

        logger.info(
            f"OrderStatusService: Admin {admin_user_id} set transaction {transaction_id} "
            f"'{current.transaction_status}' -> '{decision.value}'"
        )

        if approved:
            await self._activate_or_rollback(updated, admin_user_id)

        await self.activity.log(
            admin_user_id,
            event_type="order_status_update",
            action=(
                f"Updated order {current.payment_reference or transaction_id} status "
                f"from {current.transaction_status} to {decision.value}"
            ),
            resource_type="transaction",
            resource_id=transaction_id,
            details={
                "previous_status": current.transaction_status,
                "new_status": decision.value,
                "customer_id": current.user_id,
                "notes": notes,
            },
        )

        message = "Order approved successfully and plan activated" if approved else "Order rejected successfully"
        return UpdateOrderStatusResponse(success=True, message=message, transaction=updated)

    async def _activate_or_rollback(self, transaction: Transaction, admin_user_id: str) -> None:
        billing_period = resolve_billing_period(transaction)
        try:
            await self.subscriptions.activate_plan(
                transaction.user_id,
                transaction.package_id,
                billing_period,
                reset_quota=True,
            )
        except Exception as e:
            logger.error(
                f"OrderStatusService: Plan activation failed for transaction {transaction.id}, rolling back",
                exc_info=True,
            )
            await self.repos.transactions.update(transaction.id, TransactionUpdate(
                transaction_status=TransactionStatus.PROOF_UPLOADED.value,
                verified_by=None,
                verified_at=None,
                processed_at=None,
                notes=f"Plan activation failed: {e}",
                updated_at=utc_now(),
            ))
            raise AppError(
                f"Plan activation failed for transaction {transaction.id}: {e}",
                error_type=ErrorType.INTERNAL,
                user_message=f"Payment approved but plan activation failed: {e}",
            )

        await self.activity.log(
            admin_user_id,
            event_type="plan_activation",
            action=f"Plan activated after payment confirmation for {transaction.payment_reference or transaction.id}",
            resource_type="user",
            resource_id=transaction.user_id,
            details={
                "package_id": transaction.package_id,
                "billing_period": billing_period,
                "transaction_id": transaction.id,
            },
        )
