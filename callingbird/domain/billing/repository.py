"""Billing repository - Database operations for billing"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Company, CompanyDetails, PricingSettings
from ...models_billing import BILLABLE_STATUSES, BillingProfile, CallLog, Invoice


@dataclass
class BillableCompany:
    """Billing profile joined with the company fields the billing run needs"""

    company_id: int
    email: str
    company_name: Optional[str]
    company_created_at: Optional[datetime]
    status: str
    price_per_minute: Optional[float]
    trial_ends_at: Optional[datetime]
    last_billed_month: Optional[datetime]
    mollie_customer_id: Optional[str]
    mollie_mandate_id: Optional[str]


# Sentinel for "leave this column untouched" in upserts
_UNSET = object()


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_billing_profile(db: Session, company_id: int) -> Optional[BillingProfile]:
        """Get billing profile by company ID"""
        return db.query(BillingProfile).filter(BillingProfile.company_id == company_id).first()

    @staticmethod
    def upsert_billing_profile(
        db: Session,
        company_id: int,
        status=_UNSET,
        price_per_minute=_UNSET,
        trial_ends_at=_UNSET,
        mollie_customer_id=_UNSET,
        mollie_mandate_id=_UNSET,
    ) -> BillingProfile:
        """Create or update a billing profile; omitted fields keep their value"""
        profile = BillingRepository.get_billing_profile(db, company_id)
        if not profile:
            profile = BillingProfile(company_id=company_id, status="trial")
            db.add(profile)

        updates = {
            "status": status,
            "price_per_minute": price_per_minute,
            "trial_ends_at": trial_ends_at,
            "mollie_customer_id": mollie_customer_id,
            "mollie_mandate_id": mollie_mandate_id,
        }
        for key, value in updates.items():
            if value is not _UNSET:
                setattr(profile, key, value)

        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def get_billable_companies(db: Session) -> list[BillableCompany]:
        """Profiles in trial, active or past_due with company email and name"""
        rows = (
            db.query(BillingProfile, Company.email, Company.created_at, CompanyDetails.name)
            .join(Company, Company.id == BillingProfile.company_id)
            .outerjoin(CompanyDetails, CompanyDetails.company_id == BillingProfile.company_id)
            .filter(BillingProfile.status.in_(BILLABLE_STATUSES))
            .order_by(BillingProfile.company_id)
            .all()
        )
        return [
            BillableCompany(
                company_id=profile.company_id,
                email=email,
                company_name=name,
                company_created_at=created_at,
                status=profile.status,
                price_per_minute=profile.price_per_minute,
                trial_ends_at=profile.trial_ends_at,
                last_billed_month=profile.last_billed_month,
                mollie_customer_id=profile.mollie_customer_id,
                mollie_mandate_id=profile.mollie_mandate_id,
            )
            for profile, email, created_at, name in rows
        ]

    @staticmethod
    def get_pricing_settings(db: Session) -> Optional[PricingSettings]:
        return db.query(PricingSettings).order_by(PricingSettings.id).first()

    @staticmethod
    def save_pricing_settings(
        db: Session, price_per_minute: Optional[float], cost_per_minute: Optional[float]
    ) -> PricingSettings:
        settings = BillingRepository.get_pricing_settings(db)
        if not settings:
            settings = PricingSettings(id=1, price_per_minute=0, cost_per_minute=0)
            db.add(settings)
        if price_per_minute is not None:
            settings.price_per_minute = price_per_minute
        if cost_per_minute is not None:
            settings.cost_per_minute = cost_per_minute
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def get_usage_seconds_between(db: Session, company_id: int, start: datetime, end: datetime) -> int:
        """Sum of call durations for calls started in [start, end)"""
        total = (
            db.query(func.coalesce(func.sum(CallLog.duration_seconds), 0))
            .filter(
                CallLog.company_id == company_id,
                CallLog.started_at >= start,
                CallLog.started_at < end,
            )
            .scalar()
        )
        return int(total or 0)

    @staticmethod
    def get_last_invoice_for_company(db: Session, company_id: int) -> Optional[Invoice]:
        """Invoice with the latest period end"""
        return (
            db.query(Invoice)
            .filter(Invoice.company_id == company_id)
            .order_by(Invoice.period_end.desc())
            .first()
        )

    @staticmethod
    def create_invoice(
        db: Session,
        last_billed_month: datetime,
        profile_status: Optional[str] = None,
        **fields,
    ) -> Invoice:
        """
        Store the invoice and advance the company's billing profile in one commit.

        ``last_billed_month`` becomes the new marker; ``profile_status`` (when
        given) replaces the profile status, e.g. trial -> active.
        """
        invoice = Invoice(**fields)
        db.add(invoice)
        updates = {BillingProfile.last_billed_month: last_billed_month}
        if profile_status:
            updates[BillingProfile.status] = profile_status
        db.query(BillingProfile).filter(BillingProfile.company_id == invoice.company_id).update(
            updates, synchronize_session=False
        )
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def get_invoice_by_number(db: Session, invoice_number: str) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()

    @staticmethod
    def get_invoices_for_company(db: Session, company_id: int) -> list[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.company_id == company_id)
            .order_by(Invoice.period_end.desc())
            .all()
        )

    @staticmethod
    def find_invoice_by_payment_id(db: Session, payment_id: str) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.mollie_payment_id == payment_id).first()

    @staticmethod
    def update_invoice_status(
        db: Session, invoice: Invoice, status: str, payment_link: Optional[str] = None
    ) -> Invoice:
        """Only status and payment link change after creation; a missing link keeps the old one"""
        invoice.status = status
        if payment_link:
            invoice.payment_link = payment_link
        db.commit()
        db.refresh(invoice)
        return invoice
