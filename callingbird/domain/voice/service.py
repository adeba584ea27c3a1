"""Voice settings service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ReplyStyle, VoiceSettings
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import VoiceRepository
from .schemas import ReplyStyleUpdate, VoiceSettingsUpdate

logger = logging.getLogger(__name__)


class VoiceSettingsService:
    def __init__(self, db: Session, sync: Optional[AssistantSyncService] = None):
        self.db = db
        self.repo = VoiceRepository()
        self.sync = sync or assistant_sync_service

    def get_voice_settings(self, company_id: int) -> VoiceSettings:
        settings = self.repo.get_voice_settings(self.db, company_id)
        if not settings:
            raise HTTPException(status_code=404, detail="Voice settings not configured")
        return settings

    async def save_voice_settings(self, company_id: int, data: VoiceSettingsUpdate) -> VoiceSettings:
        settings = self.repo.upsert_voice_settings(
            self.db,
            company_id,
            voice_id=data.voiceId,
            welcome_phrase=(data.welcomePhrase or "").strip() or None,
            talking_speed=data.talkingSpeed,
        )
        logger.info(f"✅ Voice settings saved for company {company_id}")
        await self.sync.sync_company(company_id)
        return settings

    def get_reply_style(self, company_id: int) -> ReplyStyle:
        style = self.repo.get_reply_style(self.db, company_id)
        if not style:
            raise HTTPException(status_code=404, detail="Reply style not configured")
        return style

    async def save_reply_style(self, company_id: int, data: ReplyStyleUpdate) -> ReplyStyle:
        style = self.repo.upsert_reply_style(
            self.db, company_id, name=data.name, description=data.description
        )
        logger.info(f"✅ Reply style saved for company {company_id}")
        await self.sync.sync_company(company_id)
        return style
