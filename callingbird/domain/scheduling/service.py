"""Scheduling service - appointment types and staff, each change re-syncs the assistant"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import AppointmentType, StaffMember
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import SchedulingRepository
from .schemas import (
    AppointmentTypeCreate,
    AppointmentTypeUpdate,
    StaffMemberCreate,
    StaffMemberUpdate,
)

logger = logging.getLogger(__name__)


def _normalize_calendar_id(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class SchedulingService:
    """Service layer for scheduling configuration"""

    def __init__(self, db: Session, sync: Optional[AssistantSyncService] = None):
        self.db = db
        self.repo = SchedulingRepository()
        self.sync = sync or assistant_sync_service

    # Appointment types

    def get_appointment_types(self, company_id: int) -> list[AppointmentType]:
        return self.repo.get_appointment_types(self.db, company_id)

    def get_appointment_type(self, company_id: int, appointment_type_id: int) -> AppointmentType:
        appointment_type = self.repo.get_appointment_type(self.db, company_id, appointment_type_id)
        if not appointment_type:
            raise HTTPException(status_code=404, detail="Appointment type not found")
        return appointment_type

    async def add_appointment_type(self, company_id: int, data: AppointmentTypeCreate) -> AppointmentType:
        appointment_type = self.repo.create_appointment_type(
            self.db,
            company_id,
            name=data.name,
            duration=data.durationMinutes,
            price=data.price,
            description=data.description,
        )
        logger.info(f"✅ Appointment type {appointment_type.id} added for company {company_id}")
        await self.sync.sync_company(company_id)
        return appointment_type

    async def update_appointment_type(
        self, company_id: int, appointment_type_id: int, data: AppointmentTypeUpdate
    ) -> AppointmentType:
        appointment_type = self.get_appointment_type(company_id, appointment_type_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name.strip()
        if data.durationMinutes is not None:
            updates["duration"] = data.durationMinutes
        if data.price is not None:
            updates["price"] = data.price
        if data.description is not None:
            updates["description"] = data.description

        appointment_type = self.repo.update_appointment_type(self.db, appointment_type, **updates)
        await self.sync.sync_company(company_id)
        return appointment_type

    async def delete_appointment_type(self, company_id: int, appointment_type_id: int) -> dict:
        appointment_type = self.get_appointment_type(company_id, appointment_type_id)
        self.repo.delete_appointment_type(self.db, appointment_type)
        await self.sync.sync_company(company_id)
        return {"message": "Appointment type deleted"}

    # Staff members

    def get_staff_members(self, company_id: int) -> list[StaffMember]:
        return self.repo.get_staff_members(self.db, company_id)

    def get_staff_member(self, company_id: int, staff_member_id: int) -> StaffMember:
        staff_member = self.repo.get_staff_member(self.db, company_id, staff_member_id)
        if not staff_member:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return staff_member

    async def add_staff_member(self, company_id: int, data: StaffMemberCreate) -> StaffMember:
        staff_member = self.repo.create_staff_member(
            self.db,
            company_id,
            name=data.name,
            role=data.role,
            specialties=data.specialties,
            availability=[slot.model_dump() for slot in data.availability],
            google_calendar_id=_normalize_calendar_id(data.googleCalendarId),
        )
        logger.info(f"✅ Staff member {staff_member.id} added for company {company_id}")
        await self.sync.sync_company(company_id)
        return staff_member

    async def update_staff_member(
        self, company_id: int, staff_member_id: int, data: StaffMemberUpdate
    ) -> StaffMember:
        staff_member = self.get_staff_member(company_id, staff_member_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name.strip()
        if data.role is not None:
            updates["role"] = data.role
        if data.specialties is not None:
            updates["specialties"] = data.specialties
        if data.availability is not None:
            updates["availability"] = [slot.model_dump() for slot in data.availability]
        if data.googleCalendarId is not None:
            updates["google_calendar_id"] = _normalize_calendar_id(data.googleCalendarId)

        staff_member = self.repo.update_staff_member(self.db, staff_member, **updates)
        await self.sync.sync_company(company_id)
        return staff_member

    async def delete_staff_member(self, company_id: int, staff_member_id: int) -> dict:
        staff_member = self.get_staff_member(company_id, staff_member_id)
        self.repo.delete_staff_member(self.db, staff_member)
        await self.sync.sync_company(company_id)
        return {"message": "Staff member deleted"}
