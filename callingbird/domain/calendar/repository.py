"""Calendar integration repository - Google and Outlook token rows"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from ...models_integrations import GoogleIntegration, OutlookIntegration

CalendarIntegration = Union[GoogleIntegration, OutlookIntegration]


class CalendarRepository:
    @staticmethod
    def get_google(db: Session, company_id: int) -> Optional[GoogleIntegration]:
        return db.query(GoogleIntegration).filter(GoogleIntegration.company_id == company_id).first()

    @staticmethod
    def get_outlook(db: Session, company_id: int) -> Optional[OutlookIntegration]:
        return db.query(OutlookIntegration).filter(OutlookIntegration.company_id == company_id).first()

    @staticmethod
    def save(db: Session, integration: CalendarIntegration) -> CalendarIntegration:
        db.add(integration)
        db.commit()
        db.refresh(integration)
        return integration

    @staticmethod
    def delete(db: Session, integration: CalendarIntegration) -> None:
        db.delete(integration)
        db.commit()
