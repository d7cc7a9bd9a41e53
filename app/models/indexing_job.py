"""Indexing job domain model"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class IndexingJobBase(BaseModel):
    """Base indexing job fields"""
    name: str
    type: str
    schedule_type: str = "one-time"
    source_data: Dict[str, Any] = {}


class IndexingJobCreate(IndexingJobBase):
    """Indexing job creation model"""
    user_id: str   # UUID as string
    status: str = "pending"
    total_urls: int = 0
    processed_urls: int = 0
    successful_urls: int = 0
    failed_urls: int = 0
    progress_percentage: float = 0
    next_run_at: Optional[datetime] = None


class IndexingJobUpdate(BaseModel):
    """Indexing job update model - all fields optional"""
    name: Optional[str] = None
    status: Optional[str] = None
    schedule_type: Optional[str] = None
    processed_urls: Optional[int] = None
    successful_urls: Optional[int] = None
    failed_urls: Optional[int] = None
    progress_percentage: Optional[float] = Field(None, ge=0, le=100)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    updated_at: Optional[datetime] = None


class IndexingJob(IndexingJobBase):
    """Complete indexing job model from database"""
    id: str
    user_id: str
    status: str
    total_urls: int = 0
    processed_urls: int = 0
    successful_urls: int = 0
    failed_urls: int = 0
    progress_percentage: float = 0
    next_run_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
