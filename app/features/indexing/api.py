"""Indexing API endpoints: job CRUD and daily quota"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_broadcaster, get_repositories
from app.features.indexing.domain import DEFAULT_PAGE_SIZE
from app.features.indexing.quota_service import QuotaService
from app.features.indexing.schemas import (
    CreateJobRequest,
    DeleteJobResponse,
    JobListResponse,
    JobResponse,
    QuotaResponse,
    UpdateJobRequest,
)
from app.features.indexing.service import IndexingJobService, page_bounds
from app.infra.supabase.repositories import RepositoryFactory
from app.middleware.auth import get_current_user_id
from app.realtime.broadcaster import RealtimeBroadcaster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/indexing", tags=["indexing"])


def get_job_service(
    repos: RepositoryFactory = Depends(get_repositories),
    broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
) -> IndexingJobService:
    return IndexingJobService(repos, broadcaster)


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    schedule: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: IndexingJobService = Depends(get_job_service),
):
    """
    Page through the authenticated user's jobs, newest first.

    `search` matches names case-insensitively; `status` and `schedule` filter
    exactly ("All Status" / "All Schedules" mean no filter).
    """
    page, limit = page_bounds(page, limit)
    return await service.list_jobs(user_id, page, limit, search=search, status=status, schedule=schedule)


@router.post("/jobs", response_model=JobResponse, status_code=201)
async def create_job(
    request: CreateJobRequest,
    user_id: str = Depends(get_current_user_id),
    service: IndexingJobService = Depends(get_job_service),
):
    job = await service.create_job(user_id, request)
    return JobResponse(job=job)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    user_id: str = Depends(get_current_user_id),
    service: IndexingJobService = Depends(get_job_service),
):
    return JobResponse(job=await service.get_job(user_id, job_id))


@router.put("/jobs/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    request: UpdateJobRequest,
    user_id: str = Depends(get_current_user_id),
    service: IndexingJobService = Depends(get_job_service),
):
    """Rename, reschedule or change status (pending on a finished job retries it)"""
    job = await service.update_job(user_id, job_id, request)
    return JobResponse(job=job)


@router.delete("/jobs/{job_id}", response_model=DeleteJobResponse)
async def delete_job(
    job_id: str,
    user_id: str = Depends(get_current_user_id),
    service: IndexingJobService = Depends(get_job_service),
):
    await service.delete_job(user_id, job_id)
    return DeleteJobResponse(success=True)


@router.get("/quota", response_model=QuotaResponse)
async def get_quota(
    user_id: str = Depends(get_current_user_id),
    repos: RepositoryFactory = Depends(get_repositories),
):
    return await QuotaService(repos).get_quota(user_id)
