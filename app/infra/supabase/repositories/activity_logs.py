"""Activity log repository"""
from supabase import Client  # type: ignore

from app.models.activity_log import ActivityLog, ActivityLogCreate, ActivityLogUpdate

from .base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog, ActivityLogCreate, ActivityLogUpdate]):
    """Repository for security/activity log entries"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_security_activity_logs", ActivityLog)
