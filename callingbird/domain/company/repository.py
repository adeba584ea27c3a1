"""Company repository - tenant records and the company context the assistant is built from"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    Company,
    CompanyCaller,
    CompanyContact,
    CompanyDetails,
    CompanyHour,
    CompanyInfo,
)


class CompanyRepository:
    """Repository for company database operations"""

    @staticmethod
    def get_company_by_id(db: Session, company_id: int) -> Optional[Company]:
        """Get company by ID"""
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_company_by_email(db: Session, email: str) -> Optional[Company]:
        """Get company by login email"""
        return db.query(Company).filter(Company.email == email).first()

    @staticmethod
    def create_company(db: Session, email: str, password_hash: Optional[str], name: str) -> Company:
        """Create a company together with its details row"""
        company = Company(email=email, password_hash=password_hash)
        db.add(company)
        db.flush()
        db.add(CompanyDetails(company_id=company.id, name=name))
        db.commit()
        db.refresh(company)
        return company

    @staticmethod
    def set_assistant_id(db: Session, company_id: int, assistant_id: str) -> None:
        """Persist the Vapi assistant id"""
        db.query(Company).filter(Company.id == company_id).update({Company.assistant_id: assistant_id})
        db.commit()

    @staticmethod
    def get_details(db: Session, company_id: int) -> Optional[CompanyDetails]:
        return db.query(CompanyDetails).filter(CompanyDetails.company_id == company_id).first()

    @staticmethod
    def get_contact(db: Session, company_id: int) -> Optional[CompanyContact]:
        return db.query(CompanyContact).filter(CompanyContact.company_id == company_id).first()

    @staticmethod
    def get_hours(db: Session, company_id: int) -> list[CompanyHour]:
        return (
            db.query(CompanyHour)
            .filter(CompanyHour.company_id == company_id)
            .order_by(CompanyHour.day_of_week)
            .all()
        )

    @staticmethod
    def get_info(db: Session, company_id: int) -> list[CompanyInfo]:
        return (
            db.query(CompanyInfo)
            .filter(CompanyInfo.company_id == company_id)
            .order_by(CompanyInfo.id)
            .all()
        )

    @staticmethod
    def get_callers(db: Session, company_id: int) -> list[CompanyCaller]:
        return db.query(CompanyCaller).filter(CompanyCaller.company_id == company_id).all()

    @staticmethod
    def upsert_details(db: Session, company_id: int, **fields) -> CompanyDetails:
        details = CompanyRepository.get_details(db, company_id)
        if not details:
            details = CompanyDetails(company_id=company_id)
            db.add(details)
        for key, value in fields.items():
            setattr(details, key, value)
        db.commit()
        db.refresh(details)
        return details

    @staticmethod
    def upsert_contact(db: Session, company_id: int, **fields) -> CompanyContact:
        contact = CompanyRepository.get_contact(db, company_id)
        if not contact:
            contact = CompanyContact(company_id=company_id)
            db.add(contact)
        for key, value in fields.items():
            setattr(contact, key, value)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def replace_hours(db: Session, company_id: int, hours: list[dict]) -> list[CompanyHour]:
        """Replace the whole opening-hours week in one commit"""
        db.query(CompanyHour).filter(CompanyHour.company_id == company_id).delete(synchronize_session=False)
        for hour in hours:
            db.add(CompanyHour(company_id=company_id, **hour))
        db.commit()
        return CompanyRepository.get_hours(db, company_id)

    @staticmethod
    def add_info(db: Session, company_id: int, value: str) -> CompanyInfo:
        info = CompanyInfo(company_id=company_id, value=value)
        db.add(info)
        db.commit()
        db.refresh(info)
        return info

    @staticmethod
    def get_info_by_id(db: Session, company_id: int, info_id: int) -> Optional[CompanyInfo]:
        return (
            db.query(CompanyInfo)
            .filter(CompanyInfo.id == info_id, CompanyInfo.company_id == company_id)
            .first()
        )

    @staticmethod
    def add_caller(db: Session, company_id: int, **fields) -> CompanyCaller:
        caller = CompanyCaller(company_id=company_id, **fields)
        db.add(caller)
        db.commit()
        db.refresh(caller)
        return caller

    @staticmethod
    def get_caller_by_id(db: Session, company_id: int, caller_id: int) -> Optional[CompanyCaller]:
        return (
            db.query(CompanyCaller)
            .filter(CompanyCaller.id == caller_id, CompanyCaller.company_id == company_id)
            .first()
        )

    @staticmethod
    def delete(db: Session, row) -> None:
        db.delete(row)
        db.commit()
