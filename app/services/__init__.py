"""Services module"""

from app.services.activity_logger import ActivityLogger
from app.services.site_settings import get_site_settings, clear_cache, DEFAULT_SETTINGS

__all__ = [
    "ActivityLogger",
    "get_site_settings",
    "clear_cache",
    "DEFAULT_SETTINGS",
]
