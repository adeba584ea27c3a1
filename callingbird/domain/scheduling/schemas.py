"""Scheduling domain schemas - Pydantic models for validation"""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class StaffAvailability(BaseModel):
    dayOfWeek: int = Field(ge=1, le=7)
    startTime: str
    endTime: str
    isActive: bool = True

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class AppointmentTypeCreate(BaseModel):
    """Schema for creating an appointment type"""

    name: str
    durationMinutes: int = Field(gt=0)
    price: Optional[float] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class AppointmentTypeUpdate(BaseModel):
    name: Optional[str] = None
    durationMinutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = None
    description: Optional[str] = None


class AppointmentTypeResponse(BaseModel):
    id: int
    name: str
    durationMinutes: int
    price: Optional[float] = None
    description: Optional[str] = None


class StaffMemberCreate(BaseModel):
    """Schema for creating a staff member"""

    name: str
    role: Optional[str] = None
    specialties: list[str] = []
    availability: list[StaffAvailability] = []
    googleCalendarId: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class StaffMemberUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    specialties: Optional[list[str]] = None
    availability: Optional[list[StaffAvailability]] = None
    googleCalendarId: Optional[str] = None


class StaffMemberResponse(BaseModel):
    id: int
    name: str
    role: Optional[str] = None
    specialties: list[str] = []
    availability: list[dict] = []
    googleCalendarId: Optional[str] = None
