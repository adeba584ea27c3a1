"""Early access service"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_early_access_email
from ...models import EarlyAccessSignup
from .repository import EarlyAccessRepository
from .schemas import EarlyAccessRequest

logger = logging.getLogger(__name__)


class EarlyAccessService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = EarlyAccessRepository()

    async def submit_request(self, data: EarlyAccessRequest) -> EarlyAccessSignup:
        signup = self.repo.save(self.db, data.email, data.name, data.company)
        logger.info(f"📥 Early access request from {data.email}")

        try:
            await send_early_access_email(to=data.email, name=data.name, company=data.company)
        except Exception as e:
            logger.error(f"Failed to send early access confirmation to {data.email}: {e}")
        return signup

    def cancel_request(self, email: str) -> bool:
        email = (email or "").strip().lower()
        if not email:
            raise HTTPException(status_code=400, detail="Email is required")
        removed = self.repo.delete_by_email(self.db, email)
        if removed:
            logger.info(f"🗑️ Early access request of {email} removed")
        return removed
