"""Billing feature module

Midtrans payment reconciliation, recurring renewals and admin order review.
Routers live in app.features.billing.api and are mounted by app.api.base.
"""

from app.features.billing.domain import (
    AdminOrderDecision,
    RecurringStatus,
    TransactionStatus,
    TERMINAL_STATUSES,
    map_gateway_status,
)

__all__ = [
    "AdminOrderDecision",
    "RecurringStatus",
    "TransactionStatus",
    "TERMINAL_STATUSES",
    "map_gateway_status",
]
