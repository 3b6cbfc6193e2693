from sqlalchemy import Column, Integer, String
from visitation.core.database import Base
import enum


class AppointmentStatus(str, enum.Enum):
    """Lifecycle states of a visit appointment"""
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class Status(Base):
    """
    Status lookup row.
    One row per AppointmentStatus member, so clients can address a status by id.
    """
    __tablename__ = "vis_status"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(45), unique=True, nullable=False, index=True)

    @property
    def value(self) -> AppointmentStatus:
        return AppointmentStatus(self.code)

    def __repr__(self):
        return f"<Status(id={self.id}, code='{self.code}')>"
