"""Request and response schemas for Indexing API"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.features.indexing.domain import JobStatus, JobType, ScheduleType
from app.models.indexing_job import IndexingJob


class CreateJobRequest(BaseModel):
    """New indexing job (manual URL list or sitemap)"""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: JobType
    urls: Optional[List[str]] = None
    sitemap_url: Optional[str] = Field(None, alias="sitemapUrl")
    schedule_type: ScheduleType = Field(ScheduleType.ONE_TIME, alias="scheduleType")
    start_time: Optional[datetime] = Field(None, alias="startTime")


class UpdateJobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    status: Optional[JobStatus] = None
    schedule_type: Optional[ScheduleType] = Field(None, alias="scheduleType")


class JobResponse(BaseModel):
    job: IndexingJob


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class JobListResponse(BaseModel):
    jobs: List[IndexingJob]
    pagination: Pagination


class DeleteJobResponse(BaseModel):
    success: bool


class QuotaResponse(BaseModel):
    """Daily URL quota for the current user (-1 limits mean unlimited)"""
    user_id: str
    package_id: Optional[str] = None
    package_name: Optional[str] = None
    daily_quota_used: int
    daily_quota_limit: int
    is_unlimited: bool
    quota_exhausted: bool
    remaining_quota: int
