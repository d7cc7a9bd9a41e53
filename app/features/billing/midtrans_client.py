"""Midtrans Core API client"""
import base64
import logging
from typing import Any, Dict, Optional

import httpx

from app import config
from app.core.errors import ExternalAPIError
from app.models.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

MIDTRANS_TIMEOUT_SECONDS = 30.0


class MidtransClient:
    """Thin async wrapper over the Midtrans Core API"""

    def __init__(self, server_key: str, is_production: bool = False, timeout: float = MIDTRANS_TIMEOUT_SECONDS):
        self.server_key = server_key
        self.base_url = config.MIDTRANS_PRODUCTION_URL if is_production else config.MIDTRANS_SANDBOX_URL
        self.timeout = timeout

    @classmethod
    def from_gateway(cls, gateway: Optional[PaymentGateway]) -> "MidtransClient":
        """Build a client from the gateway row, falling back to environment settings"""
        server_key = (gateway.server_key if gateway else None) or config.MIDTRANS_SERVER_KEY
        is_production = gateway.is_production if gateway else config.MIDTRANS_IS_PRODUCTION
        return cls(server_key=server_key, is_production=is_production)

    def _headers(self) -> Dict[str, str]:
        # Basic base64("<server_key>:")
        credentials = base64.b64encode(f"{self.server_key}:".encode("utf-8")).decode("ascii")
        return {
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(self, method: str, endpoint: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self._headers(), json=body)
        except httpx.HTTPError as e:
            logger.error(f"Midtrans request {method} {endpoint} failed: {e}")
            raise ExternalAPIError(f"Midtrans request failed: {e}")

        if response.status_code >= 400:
            logger.error(f"Midtrans API error {response.status_code} on {method} {endpoint}")
            raise ExternalAPIError(
                f"Midtrans API Error: {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:500]},
            )

        return response.json()

    async def charge(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /v2/charge"""
        return await self._request("POST", "/v2/charge", payload)

    async def charge_saved_card(
        self,
        order_id: str,
        gross_amount: float,
        token_id: str,
        customer_details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Charge a previously saved card token (recurring renewal)"""
        payload: Dict[str, Any] = {
            "payment_type": "credit_card",
            "transaction_details": {
                "order_id": order_id,
                "gross_amount": int(round(gross_amount)),
            },
            "credit_card": {"token_id": token_id},
        }
        if customer_details:
            payload["customer_details"] = customer_details
        return await self.charge(payload)
