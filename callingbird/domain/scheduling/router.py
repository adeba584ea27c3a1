"""Scheduling router - FastAPI endpoints for appointment types and staff"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ...models import AppointmentType, StaffMember
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .schemas import (
    AppointmentTypeCreate,
    AppointmentTypeResponse,
    AppointmentTypeUpdate,
    StaffMemberCreate,
    StaffMemberResponse,
    StaffMemberUpdate,
)
from .service import SchedulingService

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


def get_scheduling_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db, sync)


def _appointment_type_response(a: AppointmentType) -> AppointmentTypeResponse:
    return AppointmentTypeResponse(
        id=a.id,
        name=a.name,
        durationMinutes=a.duration,
        price=a.price,
        description=a.description,
    )


def _staff_member_response(s: StaffMember) -> StaffMemberResponse:
    return StaffMemberResponse(
        id=s.id,
        name=s.name,
        role=s.role,
        specialties=s.specialties or [],
        availability=s.availability or [],
        googleCalendarId=s.google_calendar_id,
    )


# ============================================================================
# APPOINTMENT TYPES
# ============================================================================


@router.get("/appointment-types", response_model=list[AppointmentTypeResponse])
async def list_appointment_types(
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """List appointment types"""
    return [_appointment_type_response(a) for a in service.get_appointment_types(company_id)]


@router.post("/appointment-types", response_model=AppointmentTypeResponse, status_code=201)
async def add_appointment_type(
    body: AppointmentTypeCreate,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Add an appointment type"""
    return _appointment_type_response(await service.add_appointment_type(company_id, body))


@router.put("/appointment-types/{appointment_type_id}", response_model=AppointmentTypeResponse)
async def update_appointment_type(
    appointment_type_id: int,
    body: AppointmentTypeUpdate,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Update an appointment type"""
    appointment_type = await service.update_appointment_type(company_id, appointment_type_id, body)
    return _appointment_type_response(appointment_type)


@router.delete("/appointment-types/{appointment_type_id}")
async def delete_appointment_type(
    appointment_type_id: int,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Delete an appointment type"""
    return await service.delete_appointment_type(company_id, appointment_type_id)


# ============================================================================
# STAFF MEMBERS
# ============================================================================


@router.get("/staff", response_model=list[StaffMemberResponse])
async def list_staff_members(
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """List staff members with their availability"""
    return [_staff_member_response(s) for s in service.get_staff_members(company_id)]


@router.post("/staff", response_model=StaffMemberResponse, status_code=201)
async def add_staff_member(
    body: StaffMemberCreate,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Add a staff member"""
    return _staff_member_response(await service.add_staff_member(company_id, body))


@router.put("/staff/{staff_member_id}", response_model=StaffMemberResponse)
async def update_staff_member(
    staff_member_id: int,
    body: StaffMemberUpdate,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Update a staff member"""
    return _staff_member_response(await service.update_staff_member(company_id, staff_member_id, body))


@router.delete("/staff/{staff_member_id}")
async def delete_staff_member(
    staff_member_id: int,
    company_id: int = Depends(get_current_company_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Delete a staff member"""
    return await service.delete_staff_member(company_id, staff_member_id)
