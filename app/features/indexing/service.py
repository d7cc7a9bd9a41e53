"""Indexing job service

CRUD over a user's indexing jobs. Every successful write is pushed to the
user's open dashboard sockets through the realtime broadcaster.
"""
import logging
import math
from typing import Optional, Tuple

from app.core.errors import DatabaseError, NotFoundError
from app.features.indexing.domain import (
    ALL_SCHEDULES_FILTER,
    ALL_STATUS_FILTER,
    MAX_PAGE_SIZE,
    RETRYABLE_STATUSES,
    JobStatus,
    JobType,
    ScheduleType,
)
from app.features.indexing.schemas import CreateJobRequest, JobListResponse, Pagination, UpdateJobRequest
from app.features.indexing.validation import validate_job_name, validate_sitemap_url, validate_urls
from app.infra.supabase.repositories import RepositoryFactory
from app.models.indexing_job import IndexingJob, IndexingJobCreate, IndexingJobUpdate
from app.realtime.broadcaster import RealtimeBroadcaster
from app.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)


def _filter_value(value: Optional[str], sentinel: str) -> Optional[str]:
    if not value or value == sentinel:
        return None
    return value


class IndexingJobService:
    """Service for the user-facing job endpoints"""

    def __init__(self, repos: RepositoryFactory, broadcaster: RealtimeBroadcaster):
        self.repos = repos
        self.broadcaster = broadcaster

    async def list_jobs(
        self,
        user_id: str,
        page: int,
        limit: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        schedule: Optional[str] = None,
    ) -> JobListResponse:
        offset = (page - 1) * limit
        jobs, total = await self.repos.indexing_jobs.list_for_user(
            user_id,
            offset=offset,
            limit=limit,
            search=search.strip() if search and search.strip() else None,
            status=_filter_value(status, ALL_STATUS_FILTER),
            schedule_type=_filter_value(schedule, ALL_SCHEDULES_FILTER),
        )
        return JobListResponse(
            jobs=jobs,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
        )

    async def get_job(self, user_id: str, job_id: str) -> IndexingJob:
        job = await self.repos.indexing_jobs.find_for_user(job_id, user_id)
        if not job:
            raise NotFoundError(f"Job {job_id} not found for user {user_id}", user_message="Job not found")
        return job

    async def create_job(self, user_id: str, request: CreateJobRequest) -> IndexingJob:
        """
        Validate and store a new pending job.

        Raises:
            ValidationError: Bad name, URL list or sitemap URL
        """
        name = validate_job_name(request.name)

        if request.type == JobType.MANUAL:
            urls = validate_urls(request.urls)
            source_data = {"urls": urls}
            total_urls = len(urls)
        else:
            source_data = {"sitemap_url": validate_sitemap_url(request.sitemap_url)}
            total_urls = 0

        next_run_at = None
        if request.schedule_type != ScheduleType.ONE_TIME:
            next_run_at = request.start_time

        job = await self.repos.indexing_jobs.create(IndexingJobCreate(
            user_id=user_id,
            name=name,
            type=request.type.value,
            schedule_type=request.schedule_type.value,
            source_data=source_data,
            status=JobStatus.PENDING.value,
            total_urls=total_urls,
            processed_urls=0,
            successful_urls=0,
            failed_urls=0,
            progress_percentage=0,
            next_run_at=next_run_at,
        ))
        logger.info(f"IndexingJobService: Created {job.type} job {job.id} for user {user_id} ({total_urls} URLs)")

        await self.broadcaster.broadcast_job_list_update(user_id, "created", job.model_dump(mode="json"))
        return job

    async def update_job(self, user_id: str, job_id: str, request: UpdateJobRequest) -> IndexingJob:
        """
        Rename, reschedule or change the status of a job.

        Moving a failed, completed or cancelled job back to pending is a retry:
        counters and progress are zeroed and the run timestamps cleared.
        """
        current = await self.get_job(user_id, job_id)

        fields = {"updated_at": utc_now()}
        if request.name is not None:
            fields["name"] = validate_job_name(request.name)
        if request.schedule_type is not None:
            fields["schedule_type"] = request.schedule_type.value
        if request.status is not None:
            fields["status"] = request.status.value
            if request.status == JobStatus.PENDING and current.status in {s.value for s in RETRYABLE_STATUSES}:
                logger.info(f"IndexingJobService: Retrying job {job_id} (was {current.status})")
                fields.update(
                    processed_urls=0,
                    successful_urls=0,
                    failed_urls=0,
                    progress_percentage=0,
                    started_at=None,
                    completed_at=None,
                    error_message=None,
                )

        updated = await self.repos.indexing_jobs.update_for_user(job_id, user_id, IndexingJobUpdate(**fields))
        if not updated:
            raise DatabaseError(f"Failed to update job {job_id}", user_message="Failed to update job")

        await self.broadcaster.broadcast_job_update(
            updated.id,
            user_id,
            updated.status,
            {"job": updated.model_dump(mode="json")},
        )
        return updated

    async def delete_job(self, user_id: str, job_id: str) -> bool:
        await self.get_job(user_id, job_id)
        deleted = await self.repos.indexing_jobs.delete_for_user(job_id, user_id)
        if not deleted:
            raise DatabaseError(f"Failed to delete job {job_id}", user_message="Failed to delete job")

        logger.info(f"IndexingJobService: Deleted job {job_id} for user {user_id}")
        await self.broadcaster.broadcast_job_list_update(user_id, "deleted", {"id": job_id})
        return True


def page_bounds(page: int, limit: int) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..MAX_PAGE_SIZE"""
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)
