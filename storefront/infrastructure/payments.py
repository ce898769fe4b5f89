"""Thin client for the Stripe REST API.

Only the three calls needed to build a mobile payment sheet are covered:
customer creation, ephemeral keys and payment intents.
"""

import httpx
from typing import Any, Dict, Optional
from storefront.core.logging_config import get_logger

logger = get_logger(__name__)

class PaymentGatewayError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class StripeGateway:
    def __init__(
        self,
        secret_key: str,
        publishable_key: str,
        api_base: str = "https://api.stripe.com",
        api_version: str = "2025-04-30.basil",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.publishable_key = publishable_key
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.transport = transport

    def _post(self, path: str, data: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        request_headers = {"Authorization": f"Bearer {self.secret_key}"}
        if headers:
            request_headers.update(headers)
        try:
            with httpx.Client(base_url=self.api_base, timeout=self.timeout, transport=self.transport) as client:
                response = client.post(path, data=data, headers=request_headers)
        except httpx.HTTPError as e:
            raise PaymentGatewayError(f"Payment processor unreachable: {e}") from e

        if response.status_code >= 400:
            message = response.text
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                pass
            raise PaymentGatewayError(message, status_code=response.status_code)
        return response.json()

    def create_customer(self, email: Optional[str]) -> Dict[str, Any]:
        data = {"email": email} if email else {}
        return self._post("/v1/customers", data)

    def create_ephemeral_key(self, customer_id: str) -> Dict[str, Any]:
        # Ephemeral keys must be created with the API version the mobile SDK expects
        return self._post(
            "/v1/ephemeral_keys",
            {"customer": customer_id},
            headers={"Stripe-Version": self.api_version},
        )

    def create_payment_intent(self, amount: int, currency: str, customer_id: str) -> Dict[str, Any]:
        return self._post(
            "/v1/payment_intents",
            {
                "amount": amount,
                "currency": currency,
                "customer": customer_id,
                "automatic_payment_methods[enabled]": "true",
            },
        )
