"""Product knowledge router"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ...models import ProductKnowledge
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .schemas import ProductImport, ProductResponse, ProductUpsert
from .service import ProductKnowledgeService

router = APIRouter(prefix="/products", tags=["Product Knowledge"])


def get_product_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> ProductKnowledgeService:
    """Dependency injection for ProductKnowledgeService"""
    return ProductKnowledgeService(db, sync)


def _product_response(p: ProductKnowledge) -> ProductResponse:
    return ProductResponse(
        id=p.id,
        name=p.name,
        sku=p.sku,
        summary=p.summary,
        status=p.status,
        synonyms=p.synonyms or [],
        content=p.content or {},
        version=p.version,
        source=p.source,
        updatedAt=p.updated_at,
    )


@router.get("", response_model=list[ProductResponse])
async def list_products(
    status: Optional[Literal["draft", "published"]] = Query(None),
    company_id: int = Depends(get_current_company_id),
    service: ProductKnowledgeService = Depends(get_product_service),
):
    """List the product catalog"""
    return [_product_response(p) for p in service.list_catalog(company_id, status)]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    company_id: int = Depends(get_current_company_id),
    service: ProductKnowledgeService = Depends(get_product_service),
):
    return _product_response(service.get_product(company_id, product_id))


@router.post("", response_model=ProductResponse)
async def upsert_product(
    body: ProductUpsert,
    company_id: int = Depends(get_current_company_id),
    service: ProductKnowledgeService = Depends(get_product_service),
):
    """Create or update a product"""
    return _product_response(await service.upsert_product(company_id, body))


@router.post("/import", response_model=list[ProductResponse])
async def import_products(
    body: ProductImport,
    company_id: int = Depends(get_current_company_id),
    service: ProductKnowledgeService = Depends(get_product_service),
):
    """Bulk import products from a JSON list"""
    products = await service.import_products(company_id, body.products, body.targetStatus)
    return [_product_response(p) for p in products]


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    company_id: int = Depends(get_current_company_id),
    service: ProductKnowledgeService = Depends(get_product_service),
):
    return await service.delete_product(company_id, product_id)
