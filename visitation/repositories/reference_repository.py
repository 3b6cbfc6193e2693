"""Reference lookups - custodied persons, visitors and statuses"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from visitation.models import AppointmentStatus, CustodiedPerson, Status, Visitor


class ReferenceRepository:
    """Read access to the records appointments point at"""

    @staticmethod
    def get_custodied_person(db: Session, custodied_person_id: int) -> Optional[CustodiedPerson]:
        return db.query(CustodiedPerson).filter(CustodiedPerson.id == custodied_person_id).first()

    @staticmethod
    def get_visitor(db: Session, visitor_id: int) -> Optional[Visitor]:
        return db.query(Visitor).filter(Visitor.id == visitor_id).first()

    @staticmethod
    def get_status(db: Session, status_id: int) -> Optional[Status]:
        return db.query(Status).filter(Status.id == status_id).first()

    @staticmethod
    def get_status_by_code(db: Session, code: AppointmentStatus) -> Optional[Status]:
        return db.query(Status).filter(Status.code == code.value).first()

    @staticmethod
    def list_statuses(db: Session) -> List[Status]:
        return db.query(Status).order_by(Status.id).all()

    @staticmethod
    def lock_parties(db: Session, custodied_person_ids: Iterable[int], visitor_ids: Iterable[int]) -> None:
        """
        Take row locks on the given custodied persons and visitors.
        Always custodied persons first, each group by ascending id, so concurrent
        operations acquire locks in the same order.
        """
        for custodied_person_id in sorted(set(custodied_person_ids)):
            (
                db.query(CustodiedPerson.id)
                .filter(CustodiedPerson.id == custodied_person_id)
                .with_for_update()
                .first()
            )
        for visitor_id in sorted(set(visitor_ids)):
            (
                db.query(Visitor.id)
                .filter(Visitor.id == visitor_id)
                .with_for_update()
                .first()
            )
