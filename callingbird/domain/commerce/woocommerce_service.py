"""WooCommerce service - REST API keys per store and the lookups the assistant uses"""

import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import WOO_DEFAULT_VERSION
from ...crypto import load_secret, store_secret
from ...models_integrations import WooCommerceIntegration
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .matching import WOO_MARGIN, pick_best_match
from .repository import CommerceRepository

logger = logging.getLogger(__name__)

MAX_PRODUCT_LIMIT = 20


def normalize_store_url(url: Optional[str]) -> str:
    trimmed = (url or "").strip()
    if not trimmed:
        raise HTTPException(status_code=400, detail="Store URL is required")
    if not re.match(r"^https?://", trimmed, re.IGNORECASE):
        trimmed = f"https://{trimmed}"
    return trimmed.rstrip("/")


def clamp_limit(limit) -> int:
    return min(MAX_PRODUCT_LIMIT, max(1, int(limit)))


class WooCommerceService:
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

    def _ensure_integration(self, company_id: int) -> WooCommerceIntegration:
        integration = self.repo.get_woocommerce(self.db, company_id)
        if not integration:
            raise HTTPException(status_code=409, detail="WooCommerce is not connected for this company")
        return integration

    def _api_url(self, integration: WooCommerceIntegration, path: str) -> str:
        version = integration.api_version or WOO_DEFAULT_VERSION
        return f"{integration.store_url}/wp-json/{version}/{path}"

    def _auth(self, integration: WooCommerceIntegration) -> httpx.BasicAuth:
        return httpx.BasicAuth(load_secret(integration, "consumer_key"), load_secret(integration, "consumer_secret"))

    def get_status(self, company_id: int) -> dict:
        integration = self.repo.get_woocommerce(self.db, company_id)
        if not integration:
            return {"connected": False, "storeUrl": None, "apiVersion": None}
        return {"connected": True, "storeUrl": integration.store_url, "apiVersion": integration.api_version}

    async def connect(
        self,
        company_id: int,
        store_url: str,
        consumer_key: str,
        consumer_secret: str,
        api_version: Optional[str] = None,
    ) -> WooCommerceIntegration:
        """Store the encrypted REST API credentials of a store"""
        url = normalize_store_url(store_url)
        if not (consumer_key or "").strip() or not (consumer_secret or "").strip():
            raise HTTPException(status_code=400, detail="Consumer key and secret are required")

        integration = self.repo.get_woocommerce(self.db, company_id) or WooCommerceIntegration(company_id=company_id)
        integration.store_url = url
        store_secret(integration, "consumer_key", consumer_key.strip())
        store_secret(integration, "consumer_secret", consumer_secret.strip())
        integration.api_version = (api_version or "").strip() or WOO_DEFAULT_VERSION
        integration = self.repo.save(self.db, integration)

        logger.info(f"✅ WooCommerce store {url} connected for company {company_id}")
        await self.sync.sync_company(company_id)
        return integration

    async def disconnect(self, company_id: int) -> None:
        integration = self._ensure_integration(company_id)
        self.repo.delete(self.db, integration)
        logger.info(f"🔌 WooCommerce disconnected for company {company_id}")
        await self.sync.sync_company(company_id)

    async def get_product_by_name(self, company_id: int, name: str) -> dict:
        integration = self._ensure_integration(company_id)
        if not (name or "").strip():
            raise HTTPException(status_code=400, detail="Product name is required")
        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.get(
                self._api_url(integration, "products"),
                params={"search": name, "per_page": MAX_PRODUCT_LIMIT},
                auth=self._auth(integration),
            )
        response.raise_for_status()

        products = response.json()
        if not isinstance(products, list):
            products = []
        best = pick_best_match(name, products, lambda p: p.get("name") or "", WOO_MARGIN)
        return {"id": str(best.get("id")), "name": str(best.get("name") or ""), "raw": best}

    async def get_order_status(self, company_id: int, order_id) -> dict:
        integration = self._ensure_integration(company_id)
        clean_id = str(order_id or "").strip()
        if not clean_id:
            raise HTTPException(status_code=400, detail="Order ID is required")

        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.get(
                self._api_url(integration, f"orders/{quote(clean_id, safe='')}"),
                auth=self._auth(integration),
            )
        if response.status_code == 404:
            raise HTTPException(status_code=404, detail="Order not found")
        response.raise_for_status()

        order = response.json()
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        return {"id": str(order.get("id")), "status": order.get("status") or "unknown", "raw": order}

    async def list_products(self, company_id: int, limit: int = 10) -> list[dict]:
        """Published products, at most 20"""
        integration = self._ensure_integration(company_id)
        limit = clamp_limit(limit)
        async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
            response = await client.get(
                self._api_url(integration, "products"),
                params={"per_page": limit, "status": "publish"},
                auth=self._auth(integration),
            )
        response.raise_for_status()

        products = response.json()
        if not isinstance(products, list):
            products = []
        return [
            {
                "id": str(p.get("id")),
                "name": str(p.get("name") or ""),
                "price": str(p["price"]) if p.get("price") else None,
                "sku": p.get("sku") or None,
                "summary": p.get("short_description") if isinstance(p.get("short_description"), str) else None,
            }
            for p in products[:limit]
        ]
