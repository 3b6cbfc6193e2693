"""
Appointment Model
Scheduled visit linking a custodied person, a visitor, a timestamp and a status
"""
from sqlalchemy import Column, Integer, BigInteger, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from visitation.core.database import Base


class Appointment(Base):
    __tablename__ = "vis_appointment"
    __table_args__ = (
        Index("idx_appointment_scheduled_at", "scheduled_at"),
        Index("idx_appointment_custodied_scheduled", "custodied_person_id", "scheduled_at"),
        Index("idx_appointment_visitor_scheduled", "visitor_id", "scheduled_at"),
        Index("idx_appointment_status", "status_id"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)

    # Parties
    custodied_person_id = Column(BigInteger, ForeignKey('vis_custodied_person.id'), nullable=False)
    visitor_id = Column(BigInteger, ForeignKey('vis_visitors.id'), nullable=False)

    # Schedule
    scheduled_at = Column(DateTime, nullable=False)
    status_id = Column(Integer, ForeignKey('vis_status.id'), nullable=False)
    notes = Column(Text, nullable=True)

    # Timestamps, written by the scheduler; created_at never changes after insert
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    custodied_person = relationship("CustodiedPerson", lazy="joined")
    visitor = relationship("Visitor", lazy="joined")
    status = relationship("Status", lazy="joined")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, custodied_person_id={self.custodied_person_id}, "
            f"visitor_id={self.visitor_id}, scheduled_at='{self.scheduled_at}')>"
        )
