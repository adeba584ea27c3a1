"""
Commerce integration routers
Shopify (/shopify) connects through OAuth, WooCommerce (/woocommerce) through REST API keys
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...config import FRONTEND_URL
from ...database import get_db
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .shopify_service import ShopifyService
from .woocommerce_service import WooCommerceService

logger = logging.getLogger(__name__)

shopify_router = APIRouter(prefix="/shopify", tags=["Shopify"])
woocommerce_router = APIRouter(prefix="/woocommerce", tags=["WooCommerce"])


class ShopifyConnectRequest(BaseModel):
    shopDomain: str


class WooCommerceConnectRequest(BaseModel):
    storeUrl: str
    consumerKey: str
    consumerSecret: str
    apiVersion: Optional[str] = None


def get_shopify_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> ShopifyService:
    """Dependency injection for ShopifyService"""
    return ShopifyService(db, sync)


def get_woocommerce_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> WooCommerceService:
    """Dependency injection for WooCommerceService"""
    return WooCommerceService(db, sync)


# ============================================================================
# SHOPIFY
# ============================================================================


@shopify_router.get("/status")
async def get_shopify_status(
    company_id: int = Depends(get_current_company_id),
    service: ShopifyService = Depends(get_shopify_service),
):
    return service.get_status(company_id)


@shopify_router.post("/connect")
async def initiate_shopify_oauth(
    body: ShopifyConnectRequest,
    company_id: int = Depends(get_current_company_id),
    service: ShopifyService = Depends(get_shopify_service),
):
    """Start the Shopify install flow for a shop"""
    return service.build_auth_url(company_id, body.shopDomain)


@shopify_router.get("/callback")
async def handle_shopify_callback(
    request: Request,
    service: ShopifyService = Depends(get_shopify_service),
):
    """Shopify redirects the merchant here; the company comes from the signed state"""
    await service.handle_callback(dict(request.query_params))
    return RedirectResponse(url=f"{FRONTEND_URL}/integrations?shopify=connected", status_code=302)


@shopify_router.delete("/disconnect")
async def disconnect_shopify(
    company_id: int = Depends(get_current_company_id),
    service: ShopifyService = Depends(get_shopify_service),
):
    await service.disconnect(company_id)
    return {"success": True}


@shopify_router.get("/products/search")
async def search_shopify_product(
    name: str = Query(...),
    company_id: int = Depends(get_current_company_id),
    service: ShopifyService = Depends(get_shopify_service),
):
    return await service.get_product_by_name(company_id, name)


@shopify_router.get("/orders/{order_id}")
async def get_shopify_order_status(
    order_id: str,
    company_id: int = Depends(get_current_company_id),
    service: ShopifyService = Depends(get_shopify_service),
):
    return await service.get_order_status(company_id, order_id)


# ============================================================================
# WOOCOMMERCE
# ============================================================================


@woocommerce_router.get("/status")
async def get_woocommerce_status(
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    return service.get_status(company_id)


@woocommerce_router.post("/connect")
async def connect_woocommerce(
    body: WooCommerceConnectRequest,
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    """Store REST API credentials generated in the WooCommerce admin"""
    await service.connect(company_id, body.storeUrl, body.consumerKey, body.consumerSecret, body.apiVersion)
    return service.get_status(company_id)


@woocommerce_router.delete("/disconnect")
async def disconnect_woocommerce(
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    await service.disconnect(company_id)
    return {"success": True}


@woocommerce_router.get("/products")
async def list_woocommerce_products(
    limit: int = Query(10),
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    return await service.list_products(company_id, limit)


@woocommerce_router.get("/products/search")
async def search_woocommerce_product(
    name: str = Query(...),
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    return await service.get_product_by_name(company_id, name)


@woocommerce_router.get("/orders/{order_id}")
async def get_woocommerce_order_status(
    order_id: str,
    company_id: int = Depends(get_current_company_id),
    service: WooCommerceService = Depends(get_woocommerce_service),
):
    return await service.get_order_status(company_id, order_id)
