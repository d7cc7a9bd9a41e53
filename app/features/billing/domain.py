"""Domain models for Billing feature"""

from enum import Enum
from typing import Optional


class TransactionStatus(str, Enum):
    """Internal payment transaction status"""
    PENDING = "pending"
    PROOF_UPLOADED = "proof_uploaded"
    COMPLETED = "completed"
    FAILED = "failed"
    REVIEW = "review"


# Once reached, a transaction accepts no further status changes
TERMINAL_STATUSES = frozenset({TransactionStatus.COMPLETED, TransactionStatus.FAILED})


class RecurringStatus(str, Enum):
    """Recurring subscription status"""
    ACTIVE = "active"
    PAYMENT_FAILED = "payment_failed"
    CANCELLED = "cancelled"


class AdminOrderDecision(str, Enum):
    """Statuses an admin may set on a manual-payment order"""
    COMPLETED = "completed"
    FAILED = "failed"


# Midtrans transaction_status values
GATEWAY_CAPTURE = "capture"
GATEWAY_SETTLEMENT = "settlement"
GATEWAY_PENDING = "pending"
GATEWAY_FAILURE_STATUSES = frozenset({"deny", "cancel", "expire", "failure"})

# Core API charge results that mean the money was taken
SUCCESSFUL_CHARGE_STATUSES = frozenset({GATEWAY_CAPTURE, GATEWAY_SETTLEMENT})


def map_gateway_status(transaction_status: Optional[str], fraud_status: Optional[str]) -> Optional[TransactionStatus]:
    """
    Translate a Midtrans (transaction_status, fraud_status) pair to our status.

    capture + accept     -> completed
    capture + challenge  -> review
    capture + other      -> failed
    settlement           -> completed
    deny/cancel/expire/failure -> failed
    pending              -> pending

    Returns None for statuses Midtrans may add later (e.g. refund), which
    callers treat as "leave the transaction as it is".
    """
    if transaction_status == GATEWAY_CAPTURE:
        if fraud_status == "accept":
            return TransactionStatus.COMPLETED
        if fraud_status == "challenge":
            return TransactionStatus.REVIEW
        return TransactionStatus.FAILED

    if transaction_status == GATEWAY_SETTLEMENT:
        return TransactionStatus.COMPLETED

    if transaction_status in GATEWAY_FAILURE_STATUSES:
        return TransactionStatus.FAILED

    if transaction_status == GATEWAY_PENDING:
        return TransactionStatus.PENDING

    return None


def is_successful_charge(transaction_status: Optional[str], fraud_status: Optional[str] = None) -> bool:
    """Whether a Core API charge response represents collected money"""
    return transaction_status in SUCCESSFUL_CHARGE_STATUSES and fraud_status != "deny"
