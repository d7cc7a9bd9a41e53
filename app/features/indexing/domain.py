"""Domain values for indexing jobs"""

from enum import Enum


class JobStatus(str, Enum):
    """Indexing job lifecycle status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class JobType(str, Enum):
    MANUAL = "manual"
    SITEMAP = "sitemap"


class ScheduleType(str, Enum):
    ONE_TIME = "one-time"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Setting a job in one of these states back to pending starts it over
RETRYABLE_STATUSES = {JobStatus.FAILED, JobStatus.COMPLETED, JobStatus.CANCELLED}

# Filter values the dashboard sends when no filter is selected
ALL_STATUS_FILTER = "All Status"
ALL_SCHEDULES_FILTER = "All Schedules"

MAX_JOB_NAME_LENGTH = 100
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Package quota value meaning "no daily limit"
UNLIMITED_QUOTA = -1
