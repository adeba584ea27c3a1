"""Billing router - FastAPI endpoints for billing operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ...models_billing import Invoice
from .billing_service import BillingService
from .schemas import InvoiceResponse, LandingSignupRequest, SignupResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def get_billing_service(db: Session = Depends(get_db)) -> BillingService:
    """Dependency injection for BillingService"""
    return BillingService(db)


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        invoiceNumber=invoice.invoice_number,
        companyId=str(invoice.company_id),
        amount=invoice.amount,
        currency=invoice.currency,
        status=invoice.status,
        issuedAt=invoice.issued_at,
        dueAt=invoice.due_at,
        periodStart=invoice.period_start,
        periodEnd=invoice.period_end,
        usageSeconds=invoice.usage_seconds,
        pricePerMinute=invoice.price_per_minute,
        paymentLink=invoice.payment_link,
        metadata=invoice.invoice_metadata or {},
    )


async def _read_payment_id(request: Request) -> Optional[str]:
    """Mollie posts ``id`` form-encoded; manual retries may send JSON"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body") from None
        if isinstance(body, dict):
            return body.get("id") or body.get("paymentId")
        return None

    form = await request.form()
    return form.get("id") or form.get("paymentId")


# ============================================================================
# SIGNUP
# ============================================================================


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def landing_signup(
    body: LandingSignupRequest,
    service: BillingService = Depends(get_billing_service),
):
    """Create an account with SEPA mandate and start the trial"""
    return await service.create_landing_signup(body)


# ============================================================================
# INVOICES
# ============================================================================


@router.get("/invoices", response_model=list[InvoiceResponse])
async def list_invoices(
    company_id: int = Depends(get_current_company_id),
    service: BillingService = Depends(get_billing_service),
):
    """List invoices of the current company"""
    return [invoice_response(i) for i in service.list_invoices(company_id)]


@router.get("/invoices/{invoice_number}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_number: str,
    company_id: int = Depends(get_current_company_id),
    service: BillingService = Depends(get_billing_service),
):
    """Get a single invoice"""
    invoice = service.get_invoice(invoice_number)
    if invoice.company_id != company_id:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice_response(invoice)


# ============================================================================
# WEBHOOKS
# ============================================================================


@router.post("/webhooks/mollie")
async def mollie_webhook(
    request: Request,
    service: BillingService = Depends(get_billing_service),
):
    """Mollie calls this on every payment status change"""
    payment_id = await _read_payment_id(request)
    invoice = await service.handle_mollie_webhook(payment_id)
    if not invoice:
        return {"received": True, "invoice": None}
    return {"received": True, "invoice": invoice_response(invoice)}
