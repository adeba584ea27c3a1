"""Commerce integration repository - Shopify and WooCommerce connections"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from ...models_integrations import ShopifyIntegration, WooCommerceIntegration

CommerceIntegration = Union[ShopifyIntegration, WooCommerceIntegration]


class CommerceRepository:
    @staticmethod
    def get_shopify(db: Session, company_id: int) -> Optional[ShopifyIntegration]:
        return db.query(ShopifyIntegration).filter(ShopifyIntegration.company_id == company_id).first()

    @staticmethod
    def get_woocommerce(db: Session, company_id: int) -> Optional[WooCommerceIntegration]:
        return (
            db.query(WooCommerceIntegration)
            .filter(WooCommerceIntegration.company_id == company_id)
            .first()
        )

    @staticmethod
    def save(db: Session, integration: CommerceIntegration) -> CommerceIntegration:
        db.add(integration)
        db.commit()
        db.refresh(integration)
        return integration

    @staticmethod
    def delete(db: Session, integration: CommerceIntegration) -> None:
        db.delete(integration)
        db.commit()
