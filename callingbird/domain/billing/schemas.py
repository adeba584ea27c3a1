"""Billing domain schemas - Pydantic models for validation"""

import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
IBAN_PATTERN = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{10,30}$")


class LandingSignupRequest(BaseModel):
    """Schema for the public signup form on the landing page"""

    companyName: str
    contactName: Optional[str] = None
    email: str
    password: str = Field(min_length=8)
    iban: str
    accountHolderName: str
    pricePerMinute: Optional[float] = Field(default=None, ge=0)

    @field_validator("companyName", "accountHolderName")
    @classmethod
    def validate_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("iban")
    @classmethod
    def validate_iban(cls, v):
        v = v.replace(" ", "").upper()
        if not IBAN_PATTERN.match(v):
            raise ValueError("Invalid IBAN")
        return v


class SignupResponse(BaseModel):
    companyId: str
    trialEndsAt: str
    mollieCustomerId: Optional[str] = None
    mollieMandateId: Optional[str] = None


class BillingRunRequest(BaseModel):
    month: Optional[int] = None
    year: Optional[int] = None


class BillingRunInvoice(BaseModel):
    invoiceNumber: str
    companyId: str
    amount: float
    status: str
    paymentLink: Optional[str] = None
    periodStart: str
    periodEnd: str


class BillingRunFailure(BaseModel):
    companyId: str
    error: str


class BillingRunResponse(BaseModel):
    invoicesCreated: int
    totalAmount: float
    invoices: list[BillingRunInvoice]
    failures: list[BillingRunFailure] = []


class InvoiceResponse(BaseModel):
    invoiceNumber: str
    companyId: str
    amount: float
    currency: str
    status: str
    issuedAt: datetime
    dueAt: datetime
    periodStart: datetime
    periodEnd: datetime
    usageSeconds: int
    pricePerMinute: float
    paymentLink: Optional[str] = None
    metadata: dict = {}


class BillingProfileUpdate(BaseModel):
    """Admin override; omitted fields keep their current value"""

    status: Optional[Literal["trial", "active", "past_due", "canceled"]] = None
    pricePerMinute: Optional[float] = Field(default=None, ge=0)
    trialEndsAt: Optional[datetime] = None
    mollieCustomerId: Optional[str] = None
    mollieMandateId: Optional[str] = None


class BillingProfileResponse(BaseModel):
    companyId: str
    status: str
    pricePerMinute: Optional[float] = None
    trialEndsAt: Optional[datetime] = None
    mollieCustomerId: Optional[str] = None
    mollieMandateId: Optional[str] = None
    lastBilledMonth: Optional[datetime] = None


class PricingSettingsUpdate(BaseModel):
    pricePerMinute: Optional[float] = Field(default=None, ge=0)
    costPerMinute: Optional[float] = Field(default=None, ge=0)


class PricingSettingsResponse(BaseModel):
    pricePerMinute: float
    costPerMinute: float
