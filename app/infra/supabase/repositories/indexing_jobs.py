"""Indexing job repository"""
from typing import List, Optional, Tuple

from supabase import Client  # type: ignore

from app.models.indexing_job import IndexingJob, IndexingJobCreate, IndexingJobUpdate

from .base import BaseRepository, escape_like


class IndexingJobRepository(BaseRepository[IndexingJob, IndexingJobCreate, IndexingJobUpdate]):
    """Repository for indexing job operations"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_indexing_jobs", IndexingJob)

    async def list_for_user(
        self,
        user_id: str,
        offset: int,
        limit: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        schedule_type: Optional[str] = None,
    ) -> Tuple[List[IndexingJob], int]:
        """Page through a user's jobs, newest first

        Returns:
            (jobs on this page, total matching jobs)
        """
        query = self._table().select("*", count="exact").eq("user_id", user_id)

        if search:
            query = query.ilike("name", f"%{escape_like(search)}%")
        if status:
            query = query.eq("status", status)
        if schedule_type:
            query = query.eq("schedule_type", schedule_type)

        response = (
            query
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return self._to_models(response.data or []), response.count or 0

    async def find_for_user(self, job_id: str, user_id: str) -> Optional[IndexingJob]:
        return await self.find_one({"id": job_id, "user_id": user_id})

    async def update_for_user(self, job_id: str, user_id: str, data: IndexingJobUpdate) -> Optional[IndexingJob]:
        updated = await self.update_by_filters({"id": job_id, "user_id": user_id}, data)
        if updated is None:
            return await self.find_for_user(job_id, user_id)
        return updated[0] if updated else None

    async def delete_for_user(self, job_id: str, user_id: str) -> bool:
        response = self._table().delete().eq("id", job_id).eq("user_id", user_id).execute()
        return len(response.data or []) > 0
