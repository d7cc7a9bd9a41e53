"""Public site settings with a process-wide TTL cache"""
import logging
import time
from typing import Optional

from app import config
from app.infra.supabase.repositories.site_settings import SiteSettingsRepository
from app.models.site_settings import SiteSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = SiteSettings(
    site_name="IndexNow Pro",
    site_tagline="Professional URL indexing automation",
    site_description="Automate Google URL indexing and track search rankings",
    contact_email=None,
    support_email=None,
    maintenance_mode=False,
    registration_enabled=True,
)

_settings_cache: Optional[SiteSettings] = None
_settings_cache_time: float = 0


async def get_site_settings(repo: SiteSettingsRepository) -> SiteSettings:
    """
    Return site settings, served from cache while it is fresh.

    Falls back to DEFAULT_SETTINGS when the table is empty or unreadable.
    The fallback is not cached, so the next call retries the database.
    """
    global _settings_cache, _settings_cache_time

    now = time.monotonic()
    if _settings_cache and (now - _settings_cache_time) < config.SITE_SETTINGS_CACHE_TTL:
        return _settings_cache

    try:
        settings = await repo.find_current()
    except Exception as e:
        logger.error(f"Failed to load site settings, using defaults: {e}")
        return _settings_cache or DEFAULT_SETTINGS

    if not settings:
        logger.warning("No site settings row found, using defaults")
        return DEFAULT_SETTINGS

    _settings_cache = settings
    _settings_cache_time = now
    return settings


def clear_cache() -> None:
    """Drop cached settings so the next read goes to the database"""
    global _settings_cache, _settings_cache_time
    _settings_cache = None
    _settings_cache_time = 0
