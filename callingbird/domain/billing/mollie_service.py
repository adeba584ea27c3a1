"""Mollie service - customers, SEPA mandates and payments over the Mollie v2 REST API"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx

from ...config import (
    BILLING_CURRENCY,
    MOLLIE_API_KEY,
    MOLLIE_BASE_URL,
    MOLLIE_REDIRECT_URL,
    MOLLIE_WEBHOOK_URL,
)
from ...errors import UpstreamRequestError

logger = logging.getLogger(__name__)


class MollieRequestError(UpstreamRequestError):
    def __init__(self, status_code: int, messages: list[str]):
        super().__init__("Mollie", status_code, messages)


def format_amount(amount: float) -> str:
    """Mollie wants amounts as strings with exactly two decimals"""
    value = Decimal(str(max(0.0, amount))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{value:.2f}"


def extract_payment_link(payment: dict) -> Optional[str]:
    links = payment.get("_links") or {}
    checkout = links.get("checkout") or {}
    return checkout.get("href") or links.get("paymentUrl") or None


class MollieService:
    """Service for Mollie API operations"""

    def __init__(
        self,
        api_key: Optional[str] = MOLLIE_API_KEY,
        base_url: str = MOLLIE_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.transport = transport

        if not self.api_key:
            logger.warning("MOLLIE_API_KEY not set; billing endpoints will fail until configured")

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict[str, Any]:
        if not self.api_key:
            raise Exception("Mollie client not initialized")

        async with httpx.AsyncClient(base_url=self.base_url, timeout=20.0, transport=self.transport) as client:
            response = await client.request(
                method,
                path,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail") or response.text
            except ValueError:
                detail = response.text
            raise MollieRequestError(response.status_code, [detail] if detail else [])
        return response.json()

    async def create_customer(self, name: str, email: str) -> dict:
        """Create a Mollie customer"""
        try:
            customer = await self._request("POST", "/customers", {"name": name, "email": email})
            logger.info(f"✅ Mollie customer created: {customer.get('id')}")
            return customer
        except Exception as e:
            logger.error(f"Failed to create Mollie customer for {email}: {e}")
            raise

    async def create_mandate(
        self,
        customer_id: str,
        consumer_name: str,
        consumer_account: str,
        mandate_reference: Optional[str] = None,
        signature_date: Optional[str] = None,
    ) -> dict:
        """Create a SEPA direct debit mandate for a customer"""
        payload = {
            "method": "directdebit",
            "consumerName": consumer_name,
            "consumerAccount": consumer_account.replace(" ", ""),
            "signatureDate": signature_date or date.today().isoformat(),
        }
        if mandate_reference:
            payload["mandateReference"] = mandate_reference

        try:
            mandate = await self._request("POST", f"/customers/{customer_id}/mandates", payload)
            logger.info(f"✅ Mollie mandate created: {mandate.get('id')} for customer {customer_id}")
            return mandate
        except Exception as e:
            logger.error(f"Failed to create Mollie mandate for customer {customer_id}: {e}")
            raise

    async def create_payment(
        self,
        amount: float,
        description: str,
        customer_id: str,
        mandate_id: Optional[str] = None,
        sequence_type: str = "recurring",
        metadata: Optional[dict] = None,
        currency: str = BILLING_CURRENCY,
        webhook_url: str = MOLLIE_WEBHOOK_URL,
        redirect_url: str = MOLLIE_REDIRECT_URL,
    ) -> dict:
        """Create a direct debit payment; ``first`` payments send the customer to checkout"""
        payload = {
            "amount": {"currency": currency, "value": format_amount(amount)},
            "description": description,
            "method": "directdebit",
            "customerId": customer_id,
            "sequenceType": sequence_type,
            "redirectUrl": redirect_url,
            "webhookUrl": webhook_url,
            "metadata": metadata or {},
        }
        if mandate_id:
            payload["mandateId"] = mandate_id

        try:
            payment = await self._request("POST", "/payments", payload)
            logger.info(f"✅ Mollie payment created: {payment.get('id')} ({payment.get('status')})")
            return payment
        except Exception as e:
            logger.error(f"Failed to create Mollie payment for customer {customer_id}: {e}")
            raise

    async def get_payment(self, payment_id: str) -> dict:
        """Fetch a payment"""
        try:
            return await self._request("GET", f"/payments/{payment_id}")
        except Exception as e:
            logger.error(f"Failed to fetch Mollie payment {payment_id}: {e}")
            raise


mollie_service = MollieService()
