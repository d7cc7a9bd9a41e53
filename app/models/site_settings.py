"""Public site settings model"""
from typing import Optional
from pydantic import BaseModel


class SiteSettings(BaseModel):
    site_name: str = "IndexNow Pro"
    site_tagline: Optional[str] = "Professional URL indexing automation"
    site_description: Optional[str] = None
    contact_email: Optional[str] = None
    support_email: Optional[str] = None
    maintenance_mode: bool = False
    registration_enabled: bool = True

    class Config:
        from_attributes = True
