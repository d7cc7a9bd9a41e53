"""Domain models for the application"""
from .transaction import Transaction, TransactionCreate, TransactionUpdate
from .user_profile import UserProfile, UserProfileCreate, UserProfileUpdate
from .package import Package
from .payment_gateway import PaymentGateway
from .midtrans_transaction import MidtransTransaction, MidtransTransactionCreate, MidtransTransactionUpdate
from .recurring_subscription import RecurringSubscription, RecurringSubscriptionCreate, RecurringSubscriptionUpdate
from .indexing_job import IndexingJob, IndexingJobCreate, IndexingJobUpdate
from .activity_log import ActivityLog, ActivityLogCreate, ActivityLogUpdate
from .site_settings import SiteSettings

__all__ = [
    'Transaction', 'TransactionCreate', 'TransactionUpdate',
    'UserProfile', 'UserProfileCreate', 'UserProfileUpdate',
    'Package',
    'PaymentGateway',
    'MidtransTransaction', 'MidtransTransactionCreate', 'MidtransTransactionUpdate',
    'RecurringSubscription', 'RecurringSubscriptionCreate', 'RecurringSubscriptionUpdate',
    'IndexingJob', 'IndexingJobCreate', 'IndexingJobUpdate',
    'ActivityLog', 'ActivityLogCreate', 'ActivityLogUpdate',
    'SiteSettings',
]
