"""Indexing jobs and daily URL quota"""
from app.features.indexing.domain import JobStatus, JobType, ScheduleType

__all__ = ["JobStatus", "JobType", "ScheduleType"]
