"""Custom instructions router"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import get_current_company_id
from ...database import get_db
from ..assistant.sync_service import AssistantSyncService, get_assistant_sync
from .service import CustomInstructionService

router = APIRouter(prefix="/instructions", tags=["Custom Instructions"])


class InstructionCreate(BaseModel):
    instruction: Optional[str] = None


class InstructionResponse(BaseModel):
    id: int
    instruction: str


def get_instruction_service(
    db: Session = Depends(get_db),
    sync: AssistantSyncService = Depends(get_assistant_sync),
) -> CustomInstructionService:
    """Dependency injection for CustomInstructionService"""
    return CustomInstructionService(db, sync)


@router.get("", response_model=list[InstructionResponse])
async def list_instructions(
    company_id: int = Depends(get_current_company_id),
    service: CustomInstructionService = Depends(get_instruction_service),
):
    return [InstructionResponse(id=i.id, instruction=i.instruction) for i in service.list(company_id)]


@router.post("", response_model=InstructionResponse, status_code=201)
async def create_instruction(
    body: InstructionCreate,
    company_id: int = Depends(get_current_company_id),
    service: CustomInstructionService = Depends(get_instruction_service),
):
    """Add a custom instruction for the assistant"""
    row = await service.create(company_id, body.instruction)
    return InstructionResponse(id=row.id, instruction=row.instruction)


@router.delete("/{instruction_id}")
async def delete_instruction(
    instruction_id: int,
    company_id: int = Depends(get_current_company_id),
    service: CustomInstructionService = Depends(get_instruction_service),
):
    return await service.remove(company_id, instruction_id)
