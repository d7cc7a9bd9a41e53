"""Payment package repository"""
from pydantic import BaseModel
from supabase import Client  # type: ignore

from app.models.package import Package

from .base import BaseRepository


class PackageRepository(BaseRepository[Package, BaseModel, BaseModel]):
    """Repository for payment packages (read-only)"""

    def __init__(self, client: Client):
        super().__init__(client, "indb_payment_packages", Package)
