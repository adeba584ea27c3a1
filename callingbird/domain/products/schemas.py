"""Product knowledge schemas"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator


class ProductFaqEntry(BaseModel):
    question: str
    answer: str


class ProductPolicyEntry(BaseModel):
    title: Optional[str] = None
    content: str


class ProductContent(BaseModel):
    description: Optional[str] = None
    summary: Optional[str] = None
    faq: list[ProductFaqEntry] = []
    troubleshooting: list[str] = []
    policies: list[ProductPolicyEntry] = []
    restrictedTopics: list[str] = []
    metadata: Optional[dict[str, Any]] = None


class ProductUpsert(BaseModel):
    """Create a product, or update it when ``id`` points at an existing one"""

    id: Optional[int] = None
    name: str
    sku: Optional[str] = None
    summary: Optional[str] = None
    status: Optional[Literal["draft", "published"]] = None
    synonyms: list[str] = []
    content: Optional[ProductContent] = None
    source: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Product name is required.")
        return v


class ProductImport(BaseModel):
    products: list[ProductUpsert]
    targetStatus: Optional[Literal["draft", "published"]] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    sku: Optional[str] = None
    summary: Optional[str] = None
    status: str
    synonyms: list[str] = []
    content: dict = {}
    version: int
    source: Optional[str] = None
    updatedAt: Optional[datetime] = None
