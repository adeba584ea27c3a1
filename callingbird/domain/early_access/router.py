"""Early access router - public waiting list endpoints"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import EarlyAccessRequest
from .service import EarlyAccessService

router = APIRouter(prefix="/early-access", tags=["Early Access"])


def get_early_access_service(db: Session = Depends(get_db)) -> EarlyAccessService:
    return EarlyAccessService(db)


@router.post("", status_code=201)
async def submit_early_access(
    body: EarlyAccessRequest,
    service: EarlyAccessService = Depends(get_early_access_service),
):
    """Join the waiting list; a confirmation email is sent"""
    await service.submit_request(body)
    return {"success": True}


@router.delete("")
async def cancel_early_access(
    email: str = Query(...),
    service: EarlyAccessService = Depends(get_early_access_service),
):
    """Unsubscribe link target"""
    return {"removed": service.cancel_request(email)}
