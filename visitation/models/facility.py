from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from visitation.core.database import Base


class Facility(Base):
    """
    Custodial facility. Reference data owned outside the scheduling core.
    """
    __tablename__ = "vis_facility"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    acronym = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Facility(id={self.id}, name='{self.name}', acronym='{self.acronym}')>"
