from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from visitation.core.database import Base


class CustodiedPerson(Base):
    """
    Individual held at a facility, subject of a visit.
    Only the fields the scheduler and response enrichment need are kept here.
    """
    __tablename__ = "vis_custodied_person"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    record_number = Column(String(45), unique=True, nullable=False)
    alias = Column(String(45), nullable=True)
    facility_id = Column(Integer, ForeignKey("vis_facility.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    facility = relationship("Facility", lazy="joined")

    def __repr__(self):
        return f"<CustodiedPerson(id={self.id}, name='{self.name}', record_number='{self.record_number}')>"
