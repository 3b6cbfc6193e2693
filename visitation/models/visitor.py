from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from sqlalchemy.sql import func
from visitation.core.database import Base


class Visitor(Base):
    """
    Person registered to visit custodied persons.
    """
    __tablename__ = "vis_visitors"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    visitor_name = Column(String(255), nullable=False, index=True)
    document_number = Column(String(45), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Visitor(id={self.id}, name='{self.visitor_name}', document='{self.document_number}')>"
