"""Voice router - voice settings and reply style"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .schemas import (
    ReplyStyleResponse,
    ReplyStyleUpdate,
    VoiceSettingsResponse,
    VoiceSettingsUpdate,
)
from .service import VoiceSettingsService

router = APIRouter(prefix="/voice", tags=["Voice"])


def get_voice_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> VoiceSettingsService:
    """Dependency injection for VoiceSettingsService"""
    return VoiceSettingsService(db, sync)


@router.get("/settings", response_model=VoiceSettingsResponse)
async def get_voice_settings(
    company_id: int = Depends(get_current_company_id),
    service: VoiceSettingsService = Depends(get_voice_service),
):
    s = service.get_voice_settings(company_id)
    return VoiceSettingsResponse(voiceId=s.voice_id, welcomePhrase=s.welcome_phrase, talkingSpeed=s.talking_speed)


@router.put("/settings", response_model=VoiceSettingsResponse)
async def save_voice_settings(
    body: VoiceSettingsUpdate,
    company_id: int = Depends(get_current_company_id),
    service: VoiceSettingsService = Depends(get_voice_service),
):
    """Create or update voice settings"""
    s = await service.save_voice_settings(company_id, body)
    return VoiceSettingsResponse(voiceId=s.voice_id, welcomePhrase=s.welcome_phrase, talkingSpeed=s.talking_speed)


@router.get("/reply-style", response_model=ReplyStyleResponse)
async def get_reply_style(
    company_id: int = Depends(get_current_company_id),
    service: VoiceSettingsService = Depends(get_voice_service),
):
    style = service.get_reply_style(company_id)
    return ReplyStyleResponse(name=style.name, description=style.description)


@router.put("/reply-style", response_model=ReplyStyleResponse)
async def save_reply_style(
    body: ReplyStyleUpdate,
    company_id: int = Depends(get_current_company_id),
    service: VoiceSettingsService = Depends(get_voice_service),
):
    """Create or update the reply style"""
    style = await service.save_reply_style(company_id, body)
    return ReplyStyleResponse(name=style.name, description=style.description)
