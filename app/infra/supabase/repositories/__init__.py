"""Repository factory and exports"""
from supabase import Client  # type: ignore
from .transactions import TransactionRepository
from .user_profiles import UserProfileRepository
from .packages import PackageRepository
from .payment_gateways import PaymentGatewayRepository
from .midtrans_transactions import MidtransTransactionRepository
from .recurring_subscriptions import RecurringSubscriptionRepository
from .indexing_jobs import IndexingJobRepository
from .activity_logs import ActivityLogRepository
from .site_settings import SiteSettingsRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._transactions: TransactionRepository = None
        self._user_profiles: UserProfileRepository = None
        self._packages: PackageRepository = None
        self._payment_gateways: PaymentGatewayRepository = None
        self._midtrans_transactions: MidtransTransactionRepository = None
        self._recurring_subscriptions: RecurringSubscriptionRepository = None
        self._indexing_jobs: IndexingJobRepository = None
        self._activity_logs: ActivityLogRepository = None
        self._site_settings: SiteSettingsRepository = None

    @property
    def client(self) -> Client:
        return self._client

    @property
    def transactions(self) -> TransactionRepository:
        """Get payment transaction repository"""
        if self._transactions is None:
            self._transactions = TransactionRepository(self._client)
        return self._transactions

    @property
    def user_profiles(self) -> UserProfileRepository:
        """Get user profile repository"""
        if self._user_profiles is None:
            self._user_profiles = UserProfileRepository(self._client)
        return self._user_profiles

    @property
    def packages(self) -> PackageRepository:
        if self._packages is None:
            self._packages = PackageRepository(self._client)
        return self._packages

    @property
    def payment_gateways(self) -> PaymentGatewayRepository:
        if self._payment_gateways is None:
            self._payment_gateways = PaymentGatewayRepository(self._client)
        return self._payment_gateways

    @property
    def midtrans_transactions(self) -> MidtransTransactionRepository:
        """Get Midtrans transaction record repository"""
        if self._midtrans_transactions is None:
            self._midtrans_transactions = MidtransTransactionRepository(self._client)
        return self._midtrans_transactions

    @property
    def recurring_subscriptions(self) -> RecurringSubscriptionRepository:
        """Get recurring subscription repository"""
        if self._recurring_subscriptions is None:
            self._recurring_subscriptions = RecurringSubscriptionRepository(self._client)
        return self._recurring_subscriptions

    @property
    def indexing_jobs(self) -> IndexingJobRepository:
        """Get indexing job repository"""
        if self._indexing_jobs is None:
            self._indexing_jobs = IndexingJobRepository(self._client)
        return self._indexing_jobs

    @property
    def activity_logs(self) -> ActivityLogRepository:
        if self._activity_logs is None:
            self._activity_logs = ActivityLogRepository(self._client)
        return self._activity_logs

    @property
    def site_settings(self) -> SiteSettingsRepository:
        if self._site_settings is None:
            self._site_settings = SiteSettingsRepository(self._client)
        return self._site_settings


__all__ = [
    'RepositoryFactory',
    'TransactionRepository',
    'UserProfileRepository',
    'PackageRepository',
    'PaymentGatewayRepository',
    'MidtransTransactionRepository',
    'RecurringSubscriptionRepository',
    'IndexingJobRepository',
    'ActivityLogRepository',
    'SiteSettingsRepository',
]
