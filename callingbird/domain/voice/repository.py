"""Voice repository - voice settings and reply style"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ReplyStyle, VoiceSettings


class VoiceRepository:
    """Repository for voice configuration"""

    @staticmethod
    def get_voice_settings(db: Session, company_id: int) -> Optional[VoiceSettings]:
        return db.query(VoiceSettings).filter(VoiceSettings.company_id == company_id).first()

    @staticmethod
    def upsert_voice_settings(db: Session, company_id: int, **fields) -> VoiceSettings:
        """Create or update the voice settings of a company"""
        settings = VoiceRepository.get_voice_settings(db, company_id)
        if not settings:
            settings = VoiceSettings(company_id=company_id)
            db.add(settings)
        for key, value in fields.items():
            setattr(settings, key, value)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def get_reply_style(db: Session, company_id: int) -> Optional[ReplyStyle]:
        return db.query(ReplyStyle).filter(ReplyStyle.company_id == company_id).first()

    @staticmethod
    def upsert_reply_style(db: Session, company_id: int, **fields) -> ReplyStyle:
        """Create or update the reply style of a company"""
        style = VoiceRepository.get_reply_style(db, company_id)
        if not style:
            style = ReplyStyle(company_id=company_id)
            db.add(style)
        for key, value in fields.items():
            setattr(style, key, value)
        db.commit()
        db.refresh(style)
        return style
