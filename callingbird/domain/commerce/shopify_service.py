"""
Shopify service - OAuth connection and the product/order lookups the assistant uses

The OAuth callback lands on the backend; ``state`` carries the company id in
hex, a random nonce and our own HMAC over both, and Shopify signs the callback
query with the app secret.
"""

import hashlib
import hmac
import logging
import re
import secrets
from typing import Optional
from urllib.parse import quote, urlencode

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import (
    SHOPIFY_API_VERSION,
    SHOPIFY_CLIENT_ID,
    SHOPIFY_CLIENT_SECRET,
    SHOPIFY_REDIRECT_URI,
    SHOPIFY_SCOPES,
)
from ...crypto import load_secret, store_secret
from ...models_integrations import ShopifyIntegration
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .matching import SHOPIFY_MARGIN, pick_best_match
from .repository import CommerceRepository

logger = logging.getLogger(__name__)


def normalize_shop_domain(shop: Optional[str]) -> str:
    """'My-Store', 'https://my-store.myshopify.com/' -> 'my-store.myshopify.com'"""
    trimmed = (shop or "").strip().lower()
    if not trimmed:
        raise HTTPException(status_code=400, detail="Shop domain is required")
    trimmed = re.sub(r"^https?://", "", trimmed).rstrip("/")
    if not trimmed.endswith(".myshopify.com"):
        trimmed = f"{trimmed}.myshopify.com"
    return trimmed


def _sign_state(payload: str) -> str:
    return hmac.new(SHOPIFY_CLIENT_SECRET.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def generate_state(company_id: int) -> str:
    payload = f"{company_id:x}.{secrets.token_hex(12)}"
    return f"{payload}.{_sign_state(payload)}"


def parse_state(state: Optional[str]) -> int:
    """Company id from an OAuth state this backend issued"""
    payload, _, signature = (state or "").rpartition(".")
    if not payload or not hmac.compare_digest(_sign_state(payload).encode("utf-8"), signature.encode("utf-8")):
        logger.warning("⚠️ Shopify OAuth state with invalid signature rejected")
        raise HTTPException(status_code=400, detail="Invalid OAuth state")
    try:
        return int(payload.split(".", 1)[0], 16)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid OAuth state") from None


def verify_callback_hmac(params: dict[str, str], secret: str) -> bool:
    """Shopify signs the sorted callback query (without ``hmac``) with HMAC-SHA256"""
    received = params.get("hmac")
    if not received:
        return False
    message = "&".join(f"{key}={value}" for key, value in sorted(params.items()) if key not in ("hmac", "signature"))
    expected = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)


class ShopifyService:
    def __init__(
        self,
        db: Session,
        sync: Optional[AssistantSyncService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.repo = CommerceRepository()
        self.sync = sync or assistant_sync_service
        self.transport = transport

    def _assert_config(self) -> None:
        if not SHOPIFY_CLIENT_ID or not SHOPIFY_CLIENT_SECRET or not SHOPIFY_REDIRECT_URI:
            raise HTTPException(status_code=500, detail="Shopify not configured")

    def _ensure_integration(self, company_id: int) -> ShopifyIntegration:
        integration = self.repo.get_shopify(self.db, company_id)
        if not integration:
            raise HTTPException(status_code=409, detail="Shopify is not connected for this company")
        return integration

    def _api_url(self, integration: ShopifyIntegration, path: str) -> str:
        return f"https://{integration.shop_domain}/admin/api/{SHOPIFY_API_VERSION}/{path}"

    def _headers(self, integration: ShopifyIntegration) -> dict:
        return {
            "X-Shopify-Access-Token": load_secret(integration, "access_token"),
            "Content-Type": "application/json",
        }

    def get_status(self, company_id: int) -> dict:
        integration = self.repo.get_shopify(self.db, company_id)
        if not integration:
            return {"connected": False, "shopDomain": None, "scopes": None}
        return {"connected": True, "shopDomain": integration.shop_domain, "scopes": integration.scopes}

    def build_auth_url(self, company_id: int, shop_domain: str) -> dict:
        self._assert_config()
        shop = normalize_shop_domain(shop_domain)
        state = generate_state(company_id)
        params = urlencode(
            {
                "client_id": SHOPIFY_CLIENT_ID,
                "scope": SHOPIFY_SCOPES,
                "redirect_uri": SHOPIFY_REDIRECT_URI,
                "state": state,
            }
        )
        return {"authUrl": f"https://{shop}/admin/oauth/authorize?{params}", "state": state}

    async def handle_callback(self, params: dict[str, str]) -> ShopifyIntegration:
        """Verify the signed callback, exchange the code and store the encrypted token"""
        self._assert_config()
        if not verify_callback_hmac(params, SHOPIFY_CLIENT_SECRET):
            logger.warning("⚠️ Shopify callback with invalid HMAC rejected")
            raise HTTPException(status_code=400, detail="Invalid Shopify signature")

        company_id = parse_state(params.get("state"))
        code = params.get("code")
        if not code:
            raise HTTPException(status_code=400, detail="No authorization code provided")
        shop = normalize_shop_domain(params.get("shop"))

        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.post(
                f"https://{shop}/admin/oauth/access_token",
                json={"client_id": SHOPIFY_CLIENT_ID, "client_secret": SHOPIFY_CLIENT_SECRET, "code": code},
            )
        if response.status_code != 200:
            logger.error(f"Shopify token exchange failed: {response.text}")
            raise HTTPException(status_code=400, detail="Failed to exchange authorization code")

        data = response.json()
        access_token = data.get("access_token")
        if not access_token:
            raise HTTPException(status_code=400, detail="Invalid response from Shopify: access_token missing")

        scope = data.get("scope")
        integration = self.repo.get_shopify(self.db, company_id) or ShopifyIntegration(company_id=company_id)
        integration.shop_domain = shop
        store_secret(integration, "access_token", str(access_token))
        integration.scopes = ",".join(scope) if isinstance(scope, list) else scope
        integration = self.repo.save(self.db, integration)

        logger.info(f"✅ Shopify store {shop} connected for company {company_id}")
        await self.sync.sync_company(company_id)
        return integration

    async def disconnect(self, company_id: int) -> None:
        integration = self._ensure_integration(company_id)
        self.repo.delete(self.db, integration)
        logger.info(f"🔌 Shopify disconnected for company {company_id}")
        await self.sync.sync_company(company_id)

    async def get_product_by_name(self, company_id: int, name: str) -> dict:
        integration = self._ensure_integration(company_id)
        if not (name or "").strip():
            raise HTTPException(status_code=400, detail="Product name is required")
        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.get(
                self._api_url(integration, "products.json"),
                headers=self._headers(integration),
                params={"title": name, "limit": 20},
            )
        response.raise_for_status()

        products = response.json().get("products") or []
        best = pick_best_match(name, products, lambda p: p.get("title") or "", SHOPIFY_MARGIN)
        return {"id": str(best.get("id")), "title": str(best.get("title") or ""), "raw": best}

    async def get_order_status(self, company_id: int, order_id) -> dict:
        integration = self._ensure_integration(company_id)
        clean_id = str(order_id or "").strip()
        if not clean_id:
            raise HTTPException(status_code=400, detail="Order ID is required")

        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.get(
                self._api_url(integration, f"orders/{quote(clean_id, safe='')}.json"),
                headers=self._headers(integration),
            )
        if response.status_code == 404:
            raise HTTPException(status_code=404, detail="Order not found")
        response.raise_for_status()

        order = response.json().get("order")
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        status = order.get("financial_status") or order.get("fulfillment_status") or "unknown"
        return {"id": str(order.get("id")), "status": status, "raw": order}
