"""Company domain schemas - profile the assistant is built from, and login"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..billing.schemas import EMAIL_PATTERN
from ..scheduling.schemas import TIME_PATTERN


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class LoginResponse(BaseModel):
    token: str
    companyId: str


class CompanyDetailsUpdate(BaseModel):
    name: str
    industry: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Company name is required")
        return v


class CompanyDetailsResponse(BaseModel):
    name: str
    industry: Optional[str] = None
    description: Optional[str] = None


class CompanyContactUpdate(BaseModel):
    website: Optional[str] = None
    contactEmail: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("contactEmail")
    @classmethod
    def validate_contact_email(cls, v):
        if v is None or not v.strip():
            return None
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class CompanyContactResponse(BaseModel):
    website: Optional[str] = None
    contactEmail: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CompanyHourItem(BaseModel):
    dayOfWeek: int = Field(ge=1, le=7)
    isOpen: bool = True
    openTime: Optional[str] = None
    closeTime: Optional[str] = None

    @field_validator("openTime", "closeTime")
    @classmethod
    def validate_time(cls, v):
        if v is not None and not TIME_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def open_days_need_times(self):
        if self.isOpen and (not self.openTime or not self.closeTime):
            raise ValueError("Open days need an opening and closing time")
        if self.isOpen and self.openTime >= self.closeTime:
            raise ValueError("Closing time must be after opening time")
        return self


class CompanyHoursUpdate(BaseModel):
    hours: list[CompanyHourItem]

    @field_validator("hours")
    @classmethod
    def validate_unique_days(cls, v):
        days = [h.dayOfWeek for h in v]
        if len(days) != len(set(days)):
            raise ValueError("Each day can only appear once")
        return v


class CompanyInfoCreate(BaseModel):
    value: Optional[str] = None


class CompanyInfoResponse(BaseModel):
    id: int
    value: str


class CompanyCallerCreate(BaseModel):
    name: str
    phoneNumber: str
    note: Optional[str] = None

    @field_validator("name", "phoneNumber")
    @classmethod
    def validate_not_empty(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v


class CompanyCallerResponse(BaseModel):
    id: int
    name: str
    phoneNumber: str
    note: Optional[str] = None


class CompanyProfileResponse(BaseModel):
    details: Optional[CompanyDetailsResponse] = None
    contact: Optional[CompanyContactResponse] = None
    hours: list[CompanyHourItem] = []
    info: list[CompanyInfoResponse] = []
    callers: list[CompanyCallerResponse] = []
