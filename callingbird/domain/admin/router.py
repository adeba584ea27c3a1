"""Admin router - back-office billing and assistant operations"""

import logging

from fastapi import APIRouter, Depends

from ...auth import get_current_admin
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from ..billing.billing_service import BillingService
from ..billing.router import get_billing_service
from ..billing.schemas import (
    BillingProfileResponse,
    BillingProfileUpdate,
    BillingRunRequest,
    BillingRunResponse,
    PricingSettingsResponse,
    PricingSettingsUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(get_current_admin)])


# ============================================================================
# BILLING
# ============================================================================


@router.post("/billing/run", response_model=BillingRunResponse)
async def run_monthly_billing(
    body: BillingRunRequest,
    service: BillingService = Depends(get_billing_service),
):
    """Invoice all companies whose billing period has closed"""
    logger.info(f"🧾 Admin triggered billing run (month={body.month}, year={body.year})")
    return await service.run_monthly_billing(month=body.month, year=body.year)


@router.put("/billing/profiles/{company_id}", response_model=BillingProfileResponse)
async def update_billing_profile(
    company_id: int,
    body: BillingProfileUpdate,
    service: BillingService = Depends(get_billing_service),
):
    """Override price, status, trial end or Mollie ids of a company"""
    profile = service.upsert_billing_profile(company_id, body)
    return BillingProfileResponse(
        companyId=str(profile.company_id),
        status=profile.status,
        pricePerMinute=profile.price_per_minute,
        trialEndsAt=profile.trial_ends_at,
        mollieCustomerId=profile.mollie_customer_id,
        mollieMandateId=profile.mollie_mandate_id,
        lastBilledMonth=profile.last_billed_month,
    )


@router.get("/pricing", response_model=PricingSettingsResponse)
async def get_pricing(service: BillingService = Depends(get_billing_service)):
    """Platform-wide default price per minute"""
    return service.get_pricing()


@router.put("/pricing", response_model=PricingSettingsResponse)
async def update_pricing(
    body: PricingSettingsUpdate,
    service: BillingService = Depends(get_billing_service),
):
    return service.update_pricing(body.pricePerMinute, body.costPerMinute)


# ============================================================================
# ASSISTANTS
# ============================================================================


@router.post("/assistants/{company_id}/sync")
async def force_assistant_sync(
    company_id: int,
    sync: AssistantSyncService = Depends(get_assistant_sync),
):
    """Push the assistant configuration right away, bypassing the quiet window"""
    assistant_id = await sync.sync_now(company_id)
    return {"companyId": str(company_id), "assistantId": assistant_id, "skipped": assistant_id is None}
