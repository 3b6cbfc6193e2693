"""
Per-day visit cap for a custodied person.
"""
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from visitation.repositories import AppointmentRepository


class DailyLimitPolicy:
    """
    At most `cap` appointments per custodied person per calendar day.
    The count covers every status, canceled included.
    """

    def __init__(self, cap: int = 2):
        if cap < 1:
            raise ValueError("Daily visit cap must be at least 1")
        self.cap = cap

    def count(self, db: Session, custodied_person_id: int, day: date, exclude_id: Optional[int] = None) -> int:
        return AppointmentRepository.count_for_custodied_on_day(db, custodied_person_id, day, exclude_id)

    def allows(self, db: Session, custodied_person_id: int, day: date, exclude_id: Optional[int] = None) -> bool:
        """True if one more appointment on `day` stays within the cap."""
        return self.count(db, custodied_person_id, day, exclude_id) + 1 <= self.cap
