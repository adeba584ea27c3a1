"""Scheduling repository - appointment types and staff members"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import AppointmentType, StaffMember


class SchedulingRepository:
    """Repository for scheduling database operations"""

    @staticmethod
    def get_appointment_types(db: Session, company_id: int) -> list[AppointmentType]:
        return (
            db.query(AppointmentType)
            .filter(AppointmentType.company_id == company_id)
            .order_by(AppointmentType.id)
            .all()
        )

    @staticmethod
    def get_appointment_type(
        db: Session, company_id: int, appointment_type_id: int
    ) -> Optional[AppointmentType]:
        return (
            db.query(AppointmentType)
            .filter(
                AppointmentType.id == appointment_type_id,
                AppointmentType.company_id == company_id,
            )
            .first()
        )

    @staticmethod
    def create_appointment_type(db: Session, company_id: int, **fields) -> AppointmentType:
        appointment_type = AppointmentType(company_id=company_id, **fields)
        db.add(appointment_type)
        db.commit()
        db.refresh(appointment_type)
        return appointment_type

    @staticmethod
    def update_appointment_type(db: Session, appointment_type: AppointmentType, **updates) -> AppointmentType:
        for key, value in updates.items():
            setattr(appointment_type, key, value)
        db.commit()
        db.refresh(appointment_type)
        return appointment_type

    @staticmethod
    def delete_appointment_type(db: Session, appointment_type: AppointmentType) -> None:
        db.delete(appointment_type)
        db.commit()

    @staticmethod
    def get_staff_members(db: Session, company_id: int) -> list[StaffMember]:
        return (
            db.query(StaffMember)
            .filter(StaffMember.company_id == company_id)
            .order_by(StaffMember.id)
            .all()
        )

    @staticmethod
    def get_staff_member(db: Session, company_id: int, staff_member_id: int) -> Optional[StaffMember]:
        return (
            db.query(StaffMember)
            .filter(StaffMember.id == staff_member_id, StaffMember.company_id == company_id)
            .first()
        )

    @staticmethod
    def create_staff_member(db: Session, company_id: int, **fields) -> StaffMember:
        staff_member = StaffMember(company_id=company_id, **fields)
        db.add(staff_member)
        db.commit()
        db.refresh(staff_member)
        return staff_member

    @staticmethod
    def update_staff_member(db: Session, staff_member: StaffMember, **updates) -> StaffMember:
        for key, value in updates.items():
            setattr(staff_member, key, value)
        db.commit()
        db.refresh(staff_member)
        return staff_member

    @staticmethod
    def delete_staff_member(db: Session, staff_member: StaffMember) -> None:
        db.delete(staff_member)
        db.commit()
