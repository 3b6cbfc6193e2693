"""Appointment repository - Database operations for visit appointments"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from visitation.models import Appointment, AppointmentStatus, Status

END_OF_DAY = time(23, 59, 59)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Local midnight to 23:59:59 of `day`."""
    return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)


@dataclass(frozen=True)
class AppointmentCriteria:
    """
    Filter for appointment listings.
    A field left as None imposes no constraint.
    """
    custodied_person_id: Optional[int] = None
    visitor_id: Optional[int] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    status_id: Optional[int] = None

    @classmethod
    def for_dates(
        cls,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        **fields,
    ) -> "AppointmentCriteria":
        """Build criteria from whole calendar days, inclusive on both ends."""
        return cls(
            starts_at=datetime.combine(start_date, time.min) if start_date else None,
            ends_at=datetime.combine(end_date, END_OF_DAY) if end_date else None,
            **fields,
        )

    def clauses(self) -> list:
        clauses = []
        if self.custodied_person_id is not None:
            clauses.append(Appointment.custodied_person_id == self.custodied_person_id)
        if self.visitor_id is not None:
            clauses.append(Appointment.visitor_id == self.visitor_id)
        if self.starts_at is not None:
            clauses.append(Appointment.scheduled_at >= self.starts_at)
        if self.ends_at is not None:
            clauses.append(Appointment.scheduled_at <= self.ends_at)
        if self.status_id is not None:
            clauses.append(Appointment.status_id == self.status_id)
        return clauses

    @property
    def is_range(self) -> bool:
        return self.starts_at is not None or self.ends_at is not None


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: int, for_update: bool = False) -> Optional[Appointment]:
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            # Lock only the appointment row, not the eagerly joined references
            query = query.with_for_update(of=Appointment).populate_existing()
        return query.first()

    @staticmethod
    def add(db: Session, appointment: Appointment) -> Appointment:
        """Stage a new appointment and flush so it gets an id; the caller commits."""
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def find(db: Session, criteria: AppointmentCriteria, ascending: Optional[bool] = None) -> List[Appointment]:
        """
        Appointments matching `criteria`.
        Range queries are ordered oldest first, generic listings newest first,
        unless `ascending` says otherwise.
        """
        if ascending is None:
            ascending = criteria.is_range
        order = Appointment.scheduled_at.asc() if ascending else Appointment.scheduled_at.desc()
        return (
            db.query(Appointment)
            .filter(*criteria.clauses())
            .order_by(order, Appointment.id)
            .all()
        )

    @staticmethod
    def find_page(
        db: Session,
        criteria: AppointmentCriteria,
        page: int,
        page_size: int,
    ) -> Tuple[int, List[Appointment]]:
        """Return (total, items) for a zero-based page, newest first."""
        query = db.query(Appointment).filter(*criteria.clauses())
        total = query.count()
        items = (
            query.order_by(Appointment.scheduled_at.desc(), Appointment.id)
            .offset(page * page_size)
            .limit(page_size)
            .all()
        )
        return total, items

    @staticmethod
    def find_custodied_conflicts(
        db: Session,
        custodied_person_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[int] = None,
    ) -> List[Appointment]:
        """Non-canceled appointments of the custodied person inside the window."""
        query = (
            db.query(Appointment)
            .join(Status, Appointment.status_id == Status.id)
            .filter(
                Appointment.custodied_person_id == custodied_person_id,
                Status.code != AppointmentStatus.CANCELED.value,
                Appointment.scheduled_at.between(window_start, window_end),
            )
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.scheduled_at.asc()).all()

    @staticmethod
    def find_visitor_conflicts(
        db: Session,
        visitor_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[int] = None,
    ) -> List[Appointment]:
        """Appointments of the visitor inside the window, whatever their status."""
        query = db.query(Appointment).filter(
            Appointment.visitor_id == visitor_id,
            Appointment.scheduled_at.between(window_start, window_end),
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.scheduled_at.asc()).all()

    @staticmethod
    def count_for_custodied_on_day(
        db: Session,
        custodied_person_id: int,
        day: date,
        exclude_id: Optional[int] = None,
    ) -> int:
        """Appointments of the custodied person on `day`, all statuses included."""
        start, end = day_bounds(day)
        query = db.query(func.count(Appointment.id)).filter(
            Appointment.custodied_person_id == custodied_person_id,
            Appointment.scheduled_at.between(start, end),
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.scalar() or 0
