"""
Calendar integration routers
Handles the OAuth connection for Google Calendar (/google) and Outlook (/outlook)
"""

from typing import Optional, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .google_service import GoogleCalendarService
from .oauth_service import CalendarOAuthService
from .outlook_service import OutlookCalendarService


class OAuthCallbackRequest(BaseModel):
    code: str


class CalendarStatusResponse(BaseModel):
    connected: bool
    accountEmail: Optional[str] = None
    calendarId: Optional[str] = None
    expiresAt: Optional[str] = None


def _build_router(prefix: str, tag: str, service_cls: Type[CalendarOAuthService]) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    def get_service(
        db: Session = Depends(get_db),
        sync: AssistantSyncService = Depends(get_assistant_sync),
    ) -> CalendarOAuthService:
        return service_cls(db, sync)

    @router.get("/status", response_model=CalendarStatusResponse)
    async def get_status(
        company_id: int = Depends(get_current_company_id),
        service: CalendarOAuthService = Depends(get_service),
    ):
        return service.get_status(company_id)

    @router.get("/connect")
    async def initiate_oauth(
        company_id: int = Depends(get_current_company_id),
        service: CalendarOAuthService = Depends(get_service),
    ):
        """Start the OAuth flow; the frontend redirects the browser to the returned URL"""
        return {"authorizationUrl": service.get_authorization_url(company_id)}

    @router.post("/callback", response_model=CalendarStatusResponse)
    async def handle_callback(
        body: OAuthCallbackRequest,
        company_id: int = Depends(get_current_company_id),
        service: CalendarOAuthService = Depends(get_service),
    ):
        """Finish the OAuth flow with the code the provider redirected back with"""
        await service.connect(company_id, body.code)
        return service.get_status(company_id)

    @router.delete("/disconnect")
    async def disconnect(
        company_id: int = Depends(get_current_company_id),
        service: CalendarOAuthService = Depends(get_service),
    ):
        await service.disconnect(company_id)
        return {"success": True}

    return router


google_router = _build_router("/google", "Google Calendar", GoogleCalendarService)
outlook_router = _build_router("/outlook", "Outlook Calendar", OutlookCalendarService)
