"""
Company profile service

Details, contact, opening hours, extra info and known callers make up the
company context in the assistant's system prompt, so every change is
persisted first and then followed by an assistant sync.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CompanyCaller, CompanyContact, CompanyDetails, CompanyHour, CompanyInfo
from ...security_utils import create_company_token, verify_password_bcrypt
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import CompanyRepository
from .schemas import (
    CompanyCallerCreate,
    CompanyContactUpdate,
    CompanyDetailsUpdate,
    CompanyHoursUpdate,
    LoginRequest,
)

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class CompanyProfileService:
    def __init__(self, db: Session, sync: Optional[AssistantSyncService] = None):
        self.db = db
        self.repo = CompanyRepository()
        self.sync = sync or assistant_sync_service

    def _ensure_company(self, company_id: int) -> None:
        if not self.repo.get_company_by_id(self.db, company_id):
            raise HTTPException(status_code=404, detail="Company not found")

    def login(self, data: LoginRequest) -> dict:
        """Exchange email and password for a company token"""
        company = self.repo.get_company_by_email(self.db, data.email)
        if not company or not company.password_hash or not verify_password_bcrypt(data.password, company.password_hash):
            logger.info(f"Login failed for {data.email}")
            raise HTTPException(status_code=401, detail="Invalid email or password")

        logger.info(f"🔑 Company {company.id} logged in")
        return {"token": create_company_token(company.id), "companyId": str(company.id)}

    def get_profile(self, company_id: int) -> dict:
        self._ensure_company(company_id)
        return {
            "details": self.repo.get_details(self.db, company_id),
            "contact": self.repo.get_contact(self.db, company_id),
            "hours": self.repo.get_hours(self.db, company_id),
            "info": self.repo.get_info(self.db, company_id),
            "callers": self.repo.get_callers(self.db, company_id),
        }

    async def save_details(self, company_id: int, data: CompanyDetailsUpdate) -> CompanyDetails:
        self._ensure_company(company_id)
        details = self.repo.upsert_details(
            self.db,
            company_id,
            name=data.name,
            industry=_clean(data.industry),
            description=_clean(data.description),
        )
        logger.info(f"✅ Company details saved for company {company_id}")
        await self.sync.sync_company(company_id)
        return details

    async def save_contact(self, company_id: int, data: CompanyContactUpdate) -> CompanyContact:
        self._ensure_company(company_id)
        contact = self.repo.upsert_contact(
            self.db,
            company_id,
            website=_clean(data.website),
            contact_email=data.contactEmail,
            phone=_clean(data.phone),
            address=_clean(data.address),
        )
        logger.info(f"✅ Contact details saved for company {company_id}")
        await self.sync.sync_company(company_id)
        return contact

    async def save_hours(self, company_id: int, data: CompanyHoursUpdate) -> list[CompanyHour]:
        """Replace the opening hours; days left out are unknown to the assistant"""
        self._ensure_company(company_id)
        hours = self.repo.replace_hours(
            self.db,
            company_id,
            [
                {
                    "day_of_week": h.dayOfWeek,
                    "is_open": h.isOpen,
                    "open_time": h.openTime if h.isOpen else None,
                    "close_time": h.closeTime if h.isOpen else None,
                }
                for h in data.hours
            ],
        )
        logger.info(f"✅ Opening hours saved for company {company_id} ({len(hours)} days)")
        await self.sync.sync_company(company_id)
        return hours

    async def add_info(self, company_id: int, value: Optional[str]) -> CompanyInfo:
        trimmed = (value or "").strip()
        if not trimmed:
            raise HTTPException(status_code=400, detail="Info cannot be empty")

        self._ensure_company(company_id)
        info = self.repo.add_info(self.db, company_id, trimmed)
        await self.sync.sync_company(company_id)
        return info

    async def remove_info(self, company_id: int, info_id: int) -> dict:
        info = self.repo.get_info_by_id(self.db, company_id, info_id)
        if not info:
            raise HTTPException(status_code=404, detail="Info not found")

        self.repo.delete(self.db, info)
        await self.sync.sync_company(company_id)
        return {"message": "Info deleted"}

    async def add_caller(self, company_id: int, data: CompanyCallerCreate) -> CompanyCaller:
        self._ensure_company(company_id)
        caller = self.repo.add_caller(
            self.db,
            company_id,
            name=data.name,
            phone_number=data.phoneNumber.replace(" ", ""),
            note=_clean(data.note),
        )
        await self.sync.sync_company(company_id)
        return caller

    async def remove_caller(self, company_id: int, caller_id: int) -> dict:
        caller = self.repo.get_caller_by_id(self.db, company_id, caller_id)
        if not caller:
            raise HTTPException(status_code=404, detail="Caller not found")

        self.repo.delete(self.db, caller)
        await self.sync.sync_company(company_id)
        return {"message": "Caller deleted"}
