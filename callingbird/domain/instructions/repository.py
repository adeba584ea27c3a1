"""Custom instruction repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import CustomInstruction


class CustomInstructionRepository:
    @staticmethod
    def get_by_company(db: Session, company_id: int) -> list[CustomInstruction]:
        return (
            db.query(CustomInstruction)
            .filter(CustomInstruction.company_id == company_id)
            .order_by(CustomInstruction.id)
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, company_id: int, instruction_id: int) -> Optional[CustomInstruction]:
        return (
            db.query(CustomInstruction)
            .filter(
                CustomInstruction.id == instruction_id,
                CustomInstruction.company_id == company_id,
            )
            .first()
        )

    @staticmethod
    def add(db: Session, company_id: int, instruction: str) -> CustomInstruction:
        row = CustomInstruction(company_id=company_id, instruction=instruction)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def delete(db: Session, row: CustomInstruction) -> None:
        db.delete(row)
        db.commit()
