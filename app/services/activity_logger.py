"""Best-effort activity logging

Activity entries are an audit trail, never a precondition: a failed write is
logged and the caller carries on.
"""
import logging
from typing import Any, Dict, Optional

from app.infra.supabase.repositories.activity_logs import ActivityLogRepository
from app.models.activity_log import ActivityLogCreate

logger = logging.getLogger(__name__)


class ActivityLogger:
    def __init__(self, repo: ActivityLogRepository):
        self.repo = repo

    async def log(
        self,
        user_id: str,
        event_type: str,
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = True,
    ) -> bool:
        """Write one activity entry; returns False if the write failed"""
        try:
            await self.repo.create(ActivityLogCreate(
                user_id=user_id,
                event_type=event_type,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                details=details or {},
                success=success,
            ))
            return True
        except Exception as e:
            logger.error(f"Failed to write activity log '{event_type}' for user {user_id}: {e}", exc_info=True)
            return False
