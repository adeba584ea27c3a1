"""
Billing Models - per-tenant billing profile, monthly usage invoices and call usage
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base, BigIntId

BILLABLE_STATUSES = ("trial", "active", "past_due")


class BillingProfile(Base):
    """Exactly one per tenant. Status moves trial -> active during the billing run."""

    __tablename__ = "billing_profiles"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    price_per_minute = Column(Float, nullable=True)  # None = platform default
    status = Column(String(20), default="trial", nullable=False)  # trial, active, past_due
    trial_ends_at = Column(DateTime, nullable=True)
    mollie_customer_id = Column(String(255), nullable=True)
    mollie_mandate_id = Column(String(255), nullable=True)
    # Start of the most recently invoiced period
    last_billed_month = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="billing_profile")


class Invoice(Base):
    """Usage invoice for one closed billing period [period_start, period_end)"""

    __tablename__ = "invoices"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    invoice_number = Column(String(64), unique=True, nullable=False, index=True)

    # Frozen at creation, never recomputed
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)
    usage_seconds = Column(Integer, default=0, nullable=False)
    price_per_minute = Column(Float, nullable=False)

    status = Column(String(20), default="pending", nullable=False)  # paid, pending, open, processing, failed
    issued_at = Column(DateTime, nullable=False)
    due_at = Column(DateTime, nullable=False)
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False, index=True)

    # Mollie payment
    mollie_payment_id = Column(String(255), nullable=True, index=True)
    payment_link = Column(String(1000), nullable=True)

    invoice_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CallLog(Base):
    __tablename__ = "call_logs"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    call_sid = Column(String(255), unique=True, nullable=False)
    from_number = Column(String(50), nullable=True)
    started_at = Column(DateTime, nullable=False, index=True)
    ended_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, default=0, nullable=False)
