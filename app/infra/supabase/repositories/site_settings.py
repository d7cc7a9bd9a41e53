"""Site settings repository"""
from typing import Optional

from pydantic import BaseModel
from supabase import Client  # type: ignore

from app.models.site_settings import SiteSettings

from .base import BaseRepository


class SiteSettingsRepository(BaseRepository[SiteSettings, BaseModel, BaseModel]):
    """Repository for the single-row site settings table"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_site_settings", SiteSettings)

    async def find_current(self) -> Optional[SiteSettings]:
        response = self._table().select("*").limit(1).execute()
        return self._to_model(response.data[0]) if response.data else None
