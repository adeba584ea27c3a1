"""Custom instruction service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CustomInstruction
from ..assistant.sync_service import AssistantSyncService, assistant_sync_service
from .repository import CustomInstructionRepository

logger = logging.getLogger(__name__)


class CustomInstructionService:
    def __init__(self, db: Session, sync: Optional[AssistantSyncService] = None):
        self.db = db
        self.repo = CustomInstructionRepository()
        self.sync = sync or assistant_sync_service

    def list(self, company_id: int) -> list[CustomInstruction]:
        return self.repo.get_by_company(self.db, company_id)

    async def create(self, company_id: int, instruction: Optional[str]) -> CustomInstruction:
        trimmed = (instruction or "").strip()
        if not trimmed:
            raise HTTPException(status_code=400, detail="Instruction cannot be empty")

        row = self.repo.add(self.db, company_id, trimmed)
        await self.sync.sync_company(company_id)
        return row

    async def remove(self, company_id: int, instruction_id: int) -> dict:
        row = self.repo.get_by_id(self.db, company_id, instruction_id)
        if not row:
            raise HTTPException(status_code=404, detail="Instruction not found")

        self.repo.delete(self.db, row)
        await self.sync.sync_company(company_id)
        return {"message": "Instruction deleted"}
