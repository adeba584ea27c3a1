"""
Billing service - landing signup, the monthly usage billing run and Mollie reconciliation

All datetimes are naive UTC.
"""

import calendar
import logging
import math
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import BILLING_CURRENCY, INVOICE_DUE_DAYS, TRIAL_DAYS
from ...email_service import (
    send_invoice_issued_email,
    send_invoice_paid_email,
    send_trial_started_email,
)
from ...models_billing import BillingProfile, Invoice
from ...security_utils import hash_password_bcrypt
from ..company.repository import CompanyRepository
from .mollie_service import MollieService, extract_payment_link, mollie_service
from .repository import BillableCompany, BillingRepository
from .schemas import BillingProfileUpdate, LandingSignupRequest

logger = logging.getLogger(__name__)

# Mollie payment status -> invoice status
PAYMENT_STATUS_MAP = {
    "paid": "paid",
    "authorized": "paid",
    "pending": "processing",
    "expired": "failed",
    "failed": "failed",
    "canceled": "failed",
}


PROFILE_FIELDS = {
    "status": "status",
    "pricePerMinute": "price_per_minute",
    "trialEndsAt": "trial_ends_at",
    "mollieCustomerId": "mollie_customer_id",
    "mollieMandateId": "mollie_mandate_id",
}


def map_payment_status(mollie_status: Optional[str]) -> str:
    """Unknown or missing statuses (open, ...) count as pending"""
    return PAYMENT_STATUS_MAP.get(mollie_status or "open", "pending")


def resolve_as_of_date(month: Optional[int], year: Optional[int], now: datetime) -> datetime:
    """Last instant of the given month, or now when month or year is missing"""
    if month is None or year is None:
        return now
    month = max(1, min(12, int(month)))
    year = int(year)
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, 23, 59, 59, 999000)


def resolve_cycle_start(profile: BillableCompany) -> Optional[datetime]:
    """Billing starts at trial end, else the last billed marker, else company creation"""
    return profile.trial_ends_at or profile.last_billed_month or profile.company_created_at


def next_billing_period(last_period_end: Optional[datetime], cycle_start: datetime) -> tuple[datetime, datetime]:
    """Periods follow each other one second apart and last one calendar month"""
    period_start = last_period_end + timedelta(seconds=1) if last_period_end else cycle_start
    # relativedelta clamps to the end of shorter months (Jan 31 -> Feb 28)
    period_end = period_start + relativedelta(months=1)
    return period_start, period_end


def usage_minutes(usage_seconds: int) -> int:
    """Started minutes are billed in full"""
    return math.ceil(usage_seconds / 60)


def calculate_amount(minutes: int, price_per_minute: float) -> float:
    amount = Decimal(minutes) * Decimal(str(price_per_minute))
    return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_invoice_number(company_id: int, period_start: datetime, period_end: datetime, now: datetime) -> str:
    """CB-{companyId}-{startYYYYMMDD}-{endYYYYMMDD}-{last 6 digits of epoch ms}"""
    epoch_ms = int(calendar.timegm(now.timetuple()) * 1000 + now.microsecond // 1000)
    suffix = str(epoch_ms)[-6:].zfill(6)
    return f"CB-{company_id}-{period_start:%Y%m%d}-{period_end:%Y%m%d}-{suffix}"


class BillingService:
    def __init__(
        self,
        db: Session,
        mollie: Optional[MollieService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.repo = BillingRepository()
        self.mollie = mollie or mollie_service
        self.clock = clock

    # ============================================================================
    # SIGNUP
    # ============================================================================

    async def create_landing_signup(self, data: LandingSignupRequest) -> dict:
        """Register a company, set up its SEPA mandate and start the trial"""
        if CompanyRepository.get_company_by_email(self.db, data.email):
            raise HTTPException(status_code=409, detail="An account with this email already exists")

        company = CompanyRepository.create_company(
            self.db,
            email=data.email,
            password_hash=hash_password_bcrypt(data.password),
            name=data.companyName,
        )
        logger.info(f"📥 Landing signup for company {company.id} ({data.email})")

        customer = await self.mollie.create_customer(name=data.companyName, email=data.email)
        mandate = await self.mollie.create_mandate(
            customer_id=customer.get("id", ""),
            consumer_name=data.accountHolderName,
            consumer_account=data.iban,
            mandate_reference=f"CB-{company.id}",
        )

        trial_ends_at = self.clock() + timedelta(days=TRIAL_DAYS)
        profile = self.repo.upsert_billing_profile(
            self.db,
            company.id,
            status="trial",
            price_per_minute=data.pricePerMinute,
            trial_ends_at=trial_ends_at,
            mollie_customer_id=customer.get("id"),
            mollie_mandate_id=mandate.get("id"),
        )

        try:
            await send_trial_started_email(
                to=data.email,
                company_name=data.companyName,
                trial_ends_at=trial_ends_at.date().isoformat(),
            )
        except Exception as e:
            logger.error(f"Failed to send trial started email to {data.email}: {e}")

        return {
            "companyId": str(company.id),
            "trialEndsAt": trial_ends_at.isoformat(),
            "mollieCustomerId": profile.mollie_customer_id,
            "mollieMandateId": profile.mollie_mandate_id,
        }

    # ============================================================================
    # MONTHLY BILLING RUN
    # ============================================================================

    async def run_monthly_billing(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        """
        Invoice every billable company for its next closed usage period.

        A company whose period has not ended by the as-of date, or whose period
        still falls inside its trial, is skipped. A failure for one company is
        logged and reported in ``failures``; the run continues with the next.
        """
        now = self.clock()
        as_of = resolve_as_of_date(month, year, now)
        pricing = self.repo.get_pricing_settings(self.db)
        default_price = pricing.price_per_minute if pricing else 0.0
        issued_at = now
        due_at = issued_at + timedelta(days=INVOICE_DUE_DAYS)

        invoices = []
        failures = []
        total = Decimal("0")

        profiles = self.repo.get_billable_companies(self.db)
        logger.info(f"🧾 Billing run as of {as_of.isoformat()} for {len(profiles)} billable companies")

        for profile in profiles:
            try:
                summary = await self._bill_company(profile, as_of, default_price, issued_at, due_at)
            except Exception as e:
                self.db.rollback()
                logger.exception(f"❌ Billing failed for company {profile.company_id}")
                failures.append({"companyId": str(profile.company_id), "error": str(e)})
                continue

            if summary:
                invoices.append(summary)
                total += Decimal(str(summary["amount"]))

        logger.info(f"✅ Billing run finished: {len(invoices)} invoices, {len(failures)} failures")
        return {
            "invoicesCreated": len(invoices),
            "totalAmount": float(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
            "invoices": invoices,
            "failures": failures,
        }

    async def _bill_company(
        self,
        profile: BillableCompany,
        as_of: datetime,
        default_price: float,
        issued_at: datetime,
        due_at: datetime,
    ) -> Optional[dict]:
        cycle_start = resolve_cycle_start(profile)
        if not cycle_start:
            return None

        last_invoice = self.repo.get_last_invoice_for_company(self.db, profile.company_id)
        period_start, period_end = next_billing_period(
            last_invoice.period_end if last_invoice else None, cycle_start
        )

        if profile.trial_ends_at and period_end <= profile.trial_ends_at:
            return None
        if as_of < period_end:
            return None

        # Stored together with the invoice so a failed run leaves the profile untouched
        trial_ended = bool(
            profile.trial_ends_at and profile.trial_ends_at <= period_end and profile.status == "trial"
        )

        price = profile.price_per_minute if profile.price_per_minute is not None else default_price
        usage_seconds = self.repo.get_usage_seconds_between(self.db, profile.company_id, period_start, period_end)
        minutes = usage_minutes(usage_seconds)
        amount = calculate_amount(minutes, price)
        invoice_number = build_invoice_number(profile.company_id, period_start, period_end, self.clock())

        payment_id = None
        payment_link = None
        status = "paid" if amount == 0 else "pending"

        if amount > 0 and profile.mollie_customer_id:
            payment = await self.mollie.create_payment(
                amount=amount,
                description=f"CallingBird usage invoice {invoice_number}",
                customer_id=profile.mollie_customer_id,
                mandate_id=profile.mollie_mandate_id,
                sequence_type="recurring" if profile.mollie_mandate_id else "first",
                metadata={
                    "invoiceNumber": invoice_number,
                    "companyId": str(profile.company_id),
                    "usageMinutes": minutes,
                    "pricePerMinute": price,
                },
            )
            payment_id = payment.get("id")
            payment_link = extract_payment_link(payment)
            status = payment.get("status") or "open"

        invoice = self.repo.create_invoice(
            self.db,
            invoice_number=invoice_number,
            company_id=profile.company_id,
            amount=amount,
            currency=BILLING_CURRENCY,
            status=status,
            issued_at=issued_at,
            due_at=due_at,
            usage_seconds=usage_seconds,
            price_per_minute=price,
            mollie_payment_id=payment_id,
            payment_link=payment_link,
            invoice_metadata={
                "usageMinutes": minutes,
                "pricePerMinute": price,
                "billingPeriod": {"start": period_start.isoformat(), "end": period_end.isoformat()},
                "billingEmail": profile.email,
                "companyName": profile.company_name,
            },
            period_start=period_start,
            period_end=period_end,
            last_billed_month=period_start,
            profile_status="active" if trial_ended else None,
        )
        if trial_ended:
            logger.info(f"🎉 Trial ended for company {profile.company_id}, now active")
        logger.info(f"✅ Invoice {invoice_number} created: {BILLING_CURRENCY} {amount:.2f} ({status})")

        try:
            await send_invoice_issued_email(
                to=profile.email,
                company_name=profile.company_name or profile.email,
                invoice_number=invoice_number,
                amount=amount,
                currency=invoice.currency,
                usage_minutes=minutes,
                price_per_minute=price,
                due_date=due_at.date().isoformat(),
                payment_link=payment_link,
            )
        except Exception as e:
            logger.error(f"Failed to send invoice email for {invoice_number}: {e}")

        return {
            "invoiceNumber": invoice_number,
            "companyId": str(profile.company_id),
            "amount": amount,
            "status": invoice.status,
            "paymentLink": payment_link,
            "periodStart": period_start.isoformat(),
            "periodEnd": period_end.isoformat(),
        }

    # ============================================================================
    # INVOICES & WEBHOOKS
    # ============================================================================

    def get_invoice(self, invoice_number: str) -> Invoice:
        invoice = self.repo.get_invoice_by_number(self.db, invoice_number)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def list_invoices(self, company_id: int) -> list[Invoice]:
        return self.repo.get_invoices_for_company(self.db, company_id)

    async def handle_mollie_webhook(self, payment_id: Optional[str]) -> Optional[Invoice]:
        """Reconcile an invoice with the payment status Mollie reports"""
        if not payment_id:
            raise HTTPException(status_code=400, detail="Missing payment id")

        payment = await self.mollie.get_payment(payment_id)
        invoice = self.repo.find_invoice_by_payment_id(self.db, payment_id)
        if not invoice:
            logger.info(f"ℹ️ No invoice for Mollie payment {payment_id}, ignoring webhook")
            return None

        previous_status = invoice.status
        status = map_payment_status(payment.get("status"))
        invoice = self.repo.update_invoice_status(self.db, invoice, status, extract_payment_link(payment))
        logger.info(f"💳 Invoice {invoice.invoice_number} is now {status} (Mollie: {payment.get('status')})")

        billing_email = (invoice.invoice_metadata or {}).get("billingEmail")
        # Mollie retries webhooks and reports paid payments again; confirm once
        if status == "paid" and previous_status != "paid" and billing_email:
            try:
                await send_invoice_paid_email(
                    to=billing_email,
                    invoice_number=invoice.invoice_number,
                    amount=invoice.amount,
                    currency=invoice.currency,
                )
            except Exception as e:
                logger.error(f"Failed to send payment confirmation for {invoice.invoice_number}: {e}")

        return invoice

    # ============================================================================
    # ADMIN
    # ============================================================================

    def upsert_billing_profile(self, company_id: int, data: BillingProfileUpdate) -> BillingProfile:
        """Admin override of a company's billing profile"""
        if not CompanyRepository.get_company_by_id(self.db, company_id):
            raise HTTPException(status_code=404, detail="Company not found")
        fields = data.model_dump(exclude_unset=True)
        updates = {PROFILE_FIELDS[key]: value for key, value in fields.items()}
        profile = self.repo.upsert_billing_profile(self.db, company_id, **updates)
        logger.info(f"✅ Billing profile of company {company_id} updated: {sorted(fields)}")
        return profile

    def get_pricing(self) -> dict:
        settings = self.repo.get_pricing_settings(self.db)
        return {
            "pricePerMinute": settings.price_per_minute if settings else 0.0,
            "costPerMinute": settings.cost_per_minute if settings else 0.0,
        }

    def update_pricing(self, price_per_minute: Optional[float], cost_per_minute: Optional[float]) -> dict:
        self.repo.save_pricing_settings(self.db, price_per_minute, cost_per_minute)
        return self.get_pricing()
