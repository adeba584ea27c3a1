from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base, BigIntId


class Company(Base):
    """A tenant. Never hard-deleted."""

    __tablename__ = "companies"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Login email
    password_hash = Column(String(255), nullable=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    assistant_id = Column(String(255), nullable=True)  # Vapi assistant id, set by the first sync
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    details = relationship("CompanyDetails", back_populates="company", uselist=False)
    contact = relationship("CompanyContact", back_populates="company", uselist=False)
    billing_profile = relationship("BillingProfile", back_populates="company", uselist=False)


class CompanyDetails(Base):
    __tablename__ = "company_details"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    industry = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    company = relationship("Company", back_populates="details")


class CompanyContact(Base):
    __tablename__ = "company_contacts"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    website = Column(String(500), nullable=True)
    contact_email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)

    company = relationship("Company", back_populates="contact")


class CompanyHour(Base):
    __tablename__ = "company_hours"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 1 = Monday .. 7 = Sunday
    is_open = Column(Boolean, default=True, nullable=False)
    open_time = Column(String(5), nullable=True)  # HH:MM
    close_time = Column(String(5), nullable=True)  # HH:MM


class CompanyInfo(Base):
    """Free-form facts the assistant can tell callers"""

    __tablename__ = "company_info"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class CompanyCaller(Base):
    __tablename__ = "company_callers"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=False)
    note = Column(Text, nullable=True)


class VoiceSettings(Base):
    __tablename__ = "voice_settings"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    voice_id = Column(String(255), nullable=False)
    welcome_phrase = Column(Text, nullable=True)
    talking_speed = Column(Float, default=1.0, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ReplyStyle(Base):
    __tablename__ = "reply_styles"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, unique=True)
    name = Column(String(100), nullable=False)  # e.g. formal, friendly
    description = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CustomInstruction(Base):
    __tablename__ = "custom_instructions"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    instruction = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class AppointmentType(Base):
    __tablename__ = "appointment_types"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class StaffMember(Base):
    __tablename__ = "staff_members"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(255), nullable=True)
    specialties = Column(JSON, default=list)  # ["Knippen", "Kleuren"]
    # [{"dayOfWeek": 1, "startTime": "09:00", "endTime": "17:00", "isActive": true}]
    availability = Column(JSON, default=list)
    google_calendar_id = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ProductKnowledge(Base):
    __tablename__ = "product_knowledge"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    company_id = Column(BigIntId, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True)
    summary = Column(Text, nullable=True)
    synonyms = Column(JSON, default=list)
    content = Column(JSON, default=dict)  # Structured facts: price, specs, faq
    status = Column(String(20), default="draft", nullable=False)  # draft, published
    version = Column(Integer, default=1, nullable=False)
    source = Column(String(50), default="manual", nullable=False)  # manual, shopify, woocommerce
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class PricingSettings(Base):
    """Singleton row with the platform-wide default pricing"""

    __tablename__ = "pricing_settings"

    id = Column(Integer, primary_key=True)
    price_per_minute = Column(Float, default=0, nullable=False)  # Charged to tenants
    cost_per_minute = Column(Float, default=0, nullable=False)  # Our telephony + model cost
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class EarlyAccessSignup(Base):
    __tablename__ = "early_access_signups"

    id = Column(BigIntId, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
