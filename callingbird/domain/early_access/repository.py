"""Early access repository - waiting list signups from the landing page"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import EarlyAccessSignup


class EarlyAccessRepository:
    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[EarlyAccessSignup]:
        return db.query(EarlyAccessSignup).filter(EarlyAccessSignup.email == email).first()

    @staticmethod
    def save(db: Session, email: str, name: Optional[str], company: Optional[str]) -> EarlyAccessSignup:
        """Insert the signup, or refresh name and company when the email is already listed"""
        signup = EarlyAccessRepository.get_by_email(db, email)
        if not signup:
            signup = EarlyAccessSignup(email=email)
            db.add(signup)
        signup.name = name
        signup.company = company
        db.commit()
        db.refresh(signup)
        return signup

    @staticmethod
    def delete_by_email(db: Session, email: str) -> bool:
        deleted = db.query(EarlyAccessSignup).filter(EarlyAccessSignup.email == email).delete()
        db.commit()
        return deleted > 0
