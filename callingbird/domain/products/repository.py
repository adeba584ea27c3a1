"""Product knowledge repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ProductKnowledge


class ProductKnowledgeRepository:
    """Repository for the product catalog the assistant answers from"""

    @staticmethod
    def list_catalog(db: Session, company_id: int, status: Optional[str] = None) -> list[ProductKnowledge]:
        """List products, optionally only draft or published ones"""
        query = db.query(ProductKnowledge).filter(ProductKnowledge.company_id == company_id)
        if status:
            query = query.filter(ProductKnowledge.status == status)
        return query.order_by(ProductKnowledge.name).all()

    @staticmethod
    def get_product(db: Session, company_id: int, product_id: int) -> Optional[ProductKnowledge]:
        return (
            db.query(ProductKnowledge)
            .filter(ProductKnowledge.id == product_id, ProductKnowledge.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_product_by_name(db: Session, company_id: int, name: str) -> Optional[ProductKnowledge]:
        return (
            db.query(ProductKnowledge)
            .filter(ProductKnowledge.company_id == company_id, ProductKnowledge.name == name)
            .first()
        )

    @staticmethod
    def save(db: Session, product: ProductKnowledge) -> ProductKnowledge:
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete(db: Session, product: ProductKnowledge) -> None:
        db.delete(product)
        db.commit()
