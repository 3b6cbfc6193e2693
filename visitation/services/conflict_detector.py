"""
Time-overlap checks for custodied persons and visitors.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from visitation.models import Appointment
from visitation.repositories import AppointmentRepository


class ConflictDetector:
    """
    Finds appointments scheduled within `window` of a proposed timestamp.
    Both window ends are inclusive.
    """

    def __init__(self, window: timedelta = timedelta(hours=1)):
        self.window = window

    def bounds(self, proposed: datetime) -> Tuple[datetime, datetime]:
        return proposed - self.window, proposed + self.window

    def custodied_conflicts(
        self,
        db: Session,
        custodied_person_id: int,
        proposed: datetime,
        exclude_id: Optional[int] = None,
    ) -> List[Appointment]:
        # Canceled appointments never block a custodied person
        start, end = self.bounds(proposed)
        return AppointmentRepository.find_custodied_conflicts(db, custodied_person_id, start, end, exclude_id)

    def visitor_conflicts(
        self,
        db: Session,
        visitor_id: int,
        proposed: datetime,
        exclude_id: Optional[int] = None,
    ) -> List[Appointment]:
        # No status filter on the visitor side
        start, end = self.bounds(proposed)
        return AppointmentRepository.find_visitor_conflicts(db, visitor_id, start, end, exclude_id)

    def has_custodied_conflict(self, db: Session, custodied_person_id: int, proposed: datetime,
                               exclude_id: Optional[int] = None) -> bool:
        return bool(self.custodied_conflicts(db, custodied_person_id, proposed, exclude_id))

    def has_visitor_conflict(self, db: Session, visitor_id: int, proposed: datetime,
                             exclude_id: Optional[int] = None) -> bool:
        return bool(self.visitor_conflicts(db, visitor_id, proposed, exclude_id))
