"""Product knowledge service - the catalog the assistant answers product questions from"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ProductKnowledge
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import ProductKnowledgeRepository
from .schemas import ProductContent, ProductUpsert

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def normalize_content(content: Optional[ProductContent]) -> dict:
    """Drop empty entries and trim text in structured product content"""
    if not content:
        return {}

    normalized: dict = {}
    if _clean(content.description):
        normalized["description"] = content.description.strip()
    if _clean(content.summary):
        normalized["summary"] = content.summary.strip()

    faq = [
        {"question": entry.question.strip(), "answer": entry.answer.strip()}
        for entry in content.faq
        if entry.question.strip() and entry.answer.strip()
    ]
    if faq:
        normalized["faq"] = faq

    troubleshooting = [step.strip() for step in content.troubleshooting if step.strip()]
    if troubleshooting:
        normalized["troubleshooting"] = troubleshooting

    policies = [
        {"title": _clean(policy.title), "content": policy.content.strip()}
        for policy in content.policies
        if policy.content.strip()
    ]
    if policies:
        normalized["policies"] = policies

    restricted = [topic.strip() for topic in content.restrictedTopics if topic.strip()]
    if restricted:
        normalized["restrictedTopics"] = restricted

    if content.metadata:
        normalized["metadata"] = content.metadata
    return normalized


class ProductKnowledgeService:
    def __init__(self, db: Session, sync: Optional[AssistantSyncService] = None):
        self.db = db
        self.repo = ProductKnowledgeRepository()
        self.sync = sync or assistant_sync_service

    def list_catalog(self, company_id: int, status: Optional[str] = None) -> list[ProductKnowledge]:
        return self.repo.list_catalog(self.db, company_id, status)

    def get_product(self, company_id: int, product_id: int) -> ProductKnowledge:
        product = self.repo.get_product(self.db, company_id, product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return product

    def _apply(self, company_id: int, data: ProductUpsert, status_override: Optional[str] = None) -> ProductKnowledge:
        product = None
        if data.id:
            product = self.repo.get_product(self.db, company_id, data.id)

        if product is None:
            product = ProductKnowledge(company_id=company_id, version=1)
        else:
            product.version = (product.version or 1) + 1

        product.name = data.name
        product.sku = _clean(data.sku)
        product.summary = _clean(data.summary)
        product.status = status_override or data.status or "draft"
        product.synonyms = [s.strip() for s in data.synonyms if s.strip()]
        product.content = normalize_content(data.content)
        product.source = data.source or "manual"
        return self.repo.save(self.db, product)

    async def upsert_product(self, company_id: int, data: ProductUpsert) -> ProductKnowledge:
        """Create or update a product; every update bumps its version"""
        product = self._apply(company_id, data)
        logger.info(f"✅ Product {product.id} saved for company {company_id} (v{product.version}, {product.status})")
        await self.sync.sync_company(company_id)
        return product

    async def import_products(
        self, company_id: int, items: list[ProductUpsert], target_status: Optional[str] = None
    ) -> list[ProductKnowledge]:
        """Bulk upsert; products are matched by id, then by exact name"""
        if not items:
            raise HTTPException(status_code=400, detail="No products to import")

        saved = []
        for item in items:
            if not item.id:
                existing = self.repo.get_product_by_name(self.db, company_id, item.name)
                if existing:
                    item = item.model_copy(update={"id": existing.id})
            saved.append(self._apply(company_id, item, status_override=target_status))

        logger.info(f"📦 Imported {len(saved)} products for company {company_id}")
        await self.sync.sync_company(company_id)
        return saved

    async def delete_product(self, company_id: int, product_id: int) -> dict:
        product = self.get_product(company_id, product_id)
        self.repo.delete(self.db, product)
        await self.sync.sync_company(company_id)
        return {"message": "Product deleted"}
