"""Voice domain schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VoiceSettingsUpdate(BaseModel):
    voiceId: str
    welcomePhrase: Optional[str] = None
    talkingSpeed: float = Field(default=1.0, ge=0.5, le=2.0)

    @field_validator("voiceId")
    @classmethod
    def validate_voice_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Voice is required")
        return v


class VoiceSettingsResponse(BaseModel):
    voiceId: str
    welcomePhrase: Optional[str] = None
    talkingSpeed: float


class ReplyStyleUpdate(BaseModel):
    name: str
    description: str

    @field_validator("name", "description")
    @classmethod
    def validate_not_empty(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v


class ReplyStyleResponse(BaseModel):
    name: str
    description: str
