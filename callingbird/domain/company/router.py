"""Company router - login and the company profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ...models import CompanyCaller, CompanyContact, CompanyDetails, CompanyHour
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .schemas import (
    CompanyCallerCreate,
    CompanyCallerResponse,
    CompanyContactResponse,
    CompanyContactUpdate,
    CompanyDetailsResponse,
    CompanyDetailsUpdate,
    CompanyHourItem,
    CompanyHoursUpdate,
    CompanyInfoCreate,
    CompanyInfoResponse,
    CompanyProfileResponse,
    LoginRequest,
    LoginResponse,
)
from .service import CompanyProfileService

auth_router = APIRouter(prefix="/auth", tags=["Auth"])
router = APIRouter(prefix="/company", tags=["Company"])


def get_company_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> CompanyProfileService:
    """Dependency injection for CompanyProfileService"""
    return CompanyProfileService(db, sync)


def details_response(d: CompanyDetails) -> CompanyDetailsResponse:
    return CompanyDetailsResponse(name=d.name, industry=d.industry, description=d.description)


def contact_response(c: CompanyContact) -> CompanyContactResponse:
    return CompanyContactResponse(website=c.website, contactEmail=c.contact_email, phone=c.phone, address=c.address)


def hour_response(h: CompanyHour) -> CompanyHourItem:
    return CompanyHourItem(dayOfWeek=h.day_of_week, isOpen=h.is_open, openTime=h.open_time, closeTime=h.close_time)


def caller_response(c: CompanyCaller) -> CompanyCallerResponse:
    return CompanyCallerResponse(id=c.id, name=c.name, phoneNumber=c.phone_number, note=c.note)


@auth_router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, service: CompanyProfileService = Depends(get_company_service)):
    """Exchange email and password for a bearer token"""
    return service.login(body)


@router.get("/profile", response_model=CompanyProfileResponse)
async def get_profile(
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    profile = service.get_profile(company_id)
    return CompanyProfileResponse(
        details=details_response(profile["details"]) if profile["details"] else None,
        contact=contact_response(profile["contact"]) if profile["contact"] else None,
        hours=[hour_response(h) for h in profile["hours"]],
        info=[CompanyInfoResponse(id=i.id, value=i.value) for i in profile["info"]],
        callers=[caller_response(c) for c in profile["callers"]],
    )


@router.put("/details", response_model=CompanyDetailsResponse)
async def save_details(
    body: CompanyDetailsUpdate,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    return details_response(await service.save_details(company_id, body))


@router.put("/contact", response_model=CompanyContactResponse)
async def save_contact(
    body: CompanyContactUpdate,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    return contact_response(await service.save_contact(company_id, body))


@router.put("/hours", response_model=list[CompanyHourItem])
async def save_hours(
    body: CompanyHoursUpdate,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    """Replace the weekly opening hours"""
    return [hour_response(h) for h in await service.save_hours(company_id, body)]


@router.post("/info", response_model=CompanyInfoResponse, status_code=201)
async def add_info(
    body: CompanyInfoCreate,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    info = await service.add_info(company_id, body.value)
    return CompanyInfoResponse(id=info.id, value=info.value)


@router.delete("/info/{info_id}")
async def remove_info(
    info_id: int,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    return await service.remove_info(company_id, info_id)


@router.post("/callers", response_model=CompanyCallerResponse, status_code=201)
async def add_caller(
    body: CompanyCallerCreate,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    """Add a known caller the assistant greets by name"""
    return caller_response(await service.add_caller(company_id, body))


@router.delete("/callers/{caller_id}")
async def remove_caller(
    caller_id: int,
    company_id: int = Depends(get_current_company_id),
    service: CompanyProfileService = Depends(get_company_service),
):
    return await service.remove_caller(company_id, caller_id)
