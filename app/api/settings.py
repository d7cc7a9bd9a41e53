"""Public site settings endpoint"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_repositories
from app.infra.supabase.repositories import RepositoryFactory
from app.models.site_settings import SiteSettings
from app.services.site_settings import get_site_settings

router = APIRouter(prefix="/api/v1/public", tags=["public"])


@router.get("/settings", response_model=SiteSettings)
async def public_settings(repos: RepositoryFactory = Depends(get_repositories)):
    return await get_site_settings(repos.site_settings)
