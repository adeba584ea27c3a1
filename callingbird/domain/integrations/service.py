"""Integration overview - which calendar and commerce providers a company has connected"""

from typing import Optional

from sqlalchemy.orm import Session

from ..calendar.repository import CalendarRepository
from ..commerce.repository import CommerceRepository

# Checked in order, the first connected provider wins
CALENDAR_PROVIDER_PRIORITY = ("google", "outlook")


def pick_calendar_provider(status: dict[str, bool]) -> Optional[str]:
    """Single active calendar provider for the assistant, Google before Outlook"""
    for provider in CALENDAR_PROVIDER_PRIORITY:
        if status.get(provider):
            return provider
    return None


class IntegrationService:
    def __init__(self, db: Session):
        self.db = db

    def get_calendar_status(self, company_id: int) -> dict[str, bool]:
        return {
            "google": CalendarRepository.get_google(self.db, company_id) is not None,
            "outlook": CalendarRepository.get_outlook(self.db, company_id) is not None,
        }

    def get_commerce_connections(self, company_id: int) -> dict[str, bool]:
        return {
            "shopify": CommerceRepository.get_shopify(self.db, company_id) is not None,
            "woocommerce": CommerceRepository.get_woocommerce(self.db, company_id) is not None,
        }

    def get_overview(self, company_id: int) -> dict:
        """Everything the integrations page shows"""
        calendar = self.get_calendar_status(company_id)
        return {
            "calendar": calendar,
            "activeCalendarProvider": pick_calendar_provider(calendar),
            "commerce": self.get_commerce_connections(company_id),
        }
