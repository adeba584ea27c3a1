from typing import Optional

from pydantic import BaseModel, field_validator

from ..billing.schemas import EMAIL_PATTERN


class EarlyAccessRequest(BaseModel):
    email: str
    name: Optional[str] = None
    company: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("name", "company")
    @classmethod
    def strip_optional(cls, v):
        if v is None:
            return None
        return v.strip() or None
