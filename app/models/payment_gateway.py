"""Payment gateway configuration model"""
from typing import Optional, Dict, Any
from pydantic import BaseModel


class PaymentGateway(BaseModel):
    id: str
    name: Optional[str] = None
    slug: str
    is_active: bool = True
    api_credentials: Dict[str, Any] = {}
    configuration: Dict[str, Any] = {}

    class Config:
        from_attributes = True

    @property
    def server_key(self) -> Optional[str]:
        return self.api_credentials.get("server_key")

    @property
    def is_production(self) -> bool:
        return self.configuration.get("environment") == "production"
