"""
Assistant context builder

Gathers the configuration snapshot pushed to Vapi. Every read runs in its own
worker thread with its own database session so they can run concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from ...database import SessionLocal
from ...models import (
    AppointmentType,
    Company,
    CompanyCaller,
    CompanyContact,
    CompanyDetails,
    CompanyHour,
    CompanyInfo,
    CustomInstruction,
    ProductKnowledge,
    ReplyStyle,
    StaffMember,
    VoiceSettings,
)
from ..company.repository import CompanyRepository
from ..instructions.repository import CustomInstructionRepository
from ..integrations.service import IntegrationService, pick_calendar_provider
from ..products.repository import ProductKnowledgeRepository
from ..scheduling.repository import SchedulingRepository
from ..voice.repository import VoiceRepository

logger = logging.getLogger(__name__)


@dataclass
class AssistantSyncConfig:
    """Point-in-time snapshot of everything the assistant needs. Never persisted."""

    company: Company
    voice_settings: VoiceSettings
    reply_style: ReplyStyle
    details: Optional[CompanyDetails] = None
    contact: Optional[CompanyContact] = None
    hours: list[CompanyHour] = field(default_factory=list)
    info: list[CompanyInfo] = field(default_factory=list)
    callers: list[CompanyCaller] = field(default_factory=list)
    appointment_types: list[AppointmentType] = field(default_factory=list)
    staff_members: list[StaffMember] = field(default_factory=list)
    calendar_provider: Optional[str] = None  # google, outlook or None
    commerce: dict[str, bool] = field(default_factory=lambda: {"shopify": False, "woocommerce": False})
    custom_instructions: list[CustomInstruction] = field(default_factory=list)
    products: list[ProductKnowledge] = field(default_factory=list)

    @property
    def company_name(self) -> str:
        if self.details and self.details.name:
            return self.details.name
        return self.company.email


class AssistantContextBuilder:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _read(self, reader: Callable[[Session, int], Any], company_id: int) -> Any:
        db = self.session_factory()
        try:
            return reader(db, company_id)
        finally:
            db.close()

    async def _fetch(self, reader: Callable[[Session, int], Any], company_id: int) -> Any:
        return await asyncio.to_thread(self._read, reader, company_id)

    async def _fetch_published_products(self, company_id: int) -> list[ProductKnowledge]:
        try:
            return await self._fetch(
                lambda db, cid: ProductKnowledgeRepository.list_catalog(db, cid, status="published"),
                company_id,
            )
        except Exception as e:
            logger.error(f"❌ Failed to load product catalog for company {company_id}, syncing without it: {e}")
            return []

    async def build(self, company_id: int) -> Optional[AssistantSyncConfig]:
        """
        Build the sync snapshot for a company.

        Returns None when the company, its voice settings or its reply style
        is missing; the assistant cannot be configured without them.
        """
        (
            company,
            voice_settings,
            reply_style,
            details,
            contact,
            hours,
            info,
            callers,
            appointment_types,
            staff_members,
            calendar_status,
            commerce,
            custom_instructions,
            products,
        ) = await asyncio.gather(
            self._fetch(CompanyRepository.get_company_by_id, company_id),
            self._fetch(VoiceRepository.get_voice_settings, company_id),
            self._fetch(VoiceRepository.get_reply_style, company_id),
            self._fetch(CompanyRepository.get_details, company_id),
            self._fetch(CompanyRepository.get_contact, company_id),
            self._fetch(CompanyRepository.get_hours, company_id),
            self._fetch(CompanyRepository.get_info, company_id),
            self._fetch(CompanyRepository.get_callers, company_id),
            self._fetch(SchedulingRepository.get_appointment_types, company_id),
            self._fetch(SchedulingRepository.get_staff_members, company_id),
            self._fetch(lambda db, cid: IntegrationService(db).get_calendar_status(cid), company_id),
            self._fetch(lambda db, cid: IntegrationService(db).get_commerce_connections(cid), company_id),
            self._fetch(CustomInstructionRepository.get_by_company, company_id),
            self._fetch_published_products(company_id),
        )

        if not company:
            logger.warning(f"⚠️ Company {company_id} not found when preparing assistant config")
            return None
        if not voice_settings or not reply_style:
            logger.warning(
                f"⚠️ Missing voice settings or reply style for company {company_id}; deferring assistant sync"
            )
            return None

        return AssistantSyncConfig(
            company=company,
            voice_settings=voice_settings,
            reply_style=reply_style,
            details=details,
            contact=contact,
            hours=hours,
            info=info,
            callers=callers,
            appointment_types=appointment_types,
            staff_members=staff_members,
            calendar_provider=pick_calendar_provider(calendar_status),
            commerce=commerce,
            custom_instructions=custom_instructions,
            products=products,
        )
