"""Payment package domain model"""
from typing import Optional, Dict, Any
from pydantic import BaseModel


class Package(BaseModel):
    """Subscription package (read-only from the API's point of view)"""
    id: str
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    quota_limits: Dict[str, Any] = {}
    pricing_tiers: Optional[Dict[str, Any]] = None
    is_active: bool = True

    class Config:
        from_attributes = True

    @property
    def daily_url_limit(self) -> int:
        """Daily URL allowance; -1 means unlimited"""
        return int(self.quota_limits.get("daily_urls", 0) or 0)
