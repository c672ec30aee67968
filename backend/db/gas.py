from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .database import Base


class Gas(Base):
    """Refrigerant gas, identified by its code (e.g. R410A)."""
    __tablename__ = "gases"

    code = Column(String, primary_key=True)
    name = Column(String, nullable=False)

    bottles = relationship("Bottle", back_populates="gas")
    transactions = relationship("Transaction", back_populates="gas")

    @property
    def to_schema(self):
        return {
            "code": self.code,
            "name": self.name,
        }
