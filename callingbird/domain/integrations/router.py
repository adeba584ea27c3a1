"""Integrations router - connection overview"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from .service import IntegrationService

router = APIRouter(prefix="/integrations", tags=["Integrations"])


@router.get("")
async def get_integrations(
    company_id: int = Depends(get_current_company_id),
    db: Session = Depends(get_db),
):
    """Connected calendar and commerce providers"""
    return IntegrationService(db).get_overview(company_id)
