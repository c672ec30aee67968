import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Bottle(Base):
    __tablename__ = "bottles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    serial = Column(String, nullable=False, unique=True, index=True)
    opening_balance_kg = Column(Numeric(12, 3), nullable=True, default=0)
    # Directly-assigned gas; wins over anything inferred from the ledger
    gas_code = Column(String, ForeignKey("gases.code", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    gas = relationship("Gas", back_populates="bottles")
    transactions = relationship(
        "Transaction",
        back_populates="bottle",
        cascade="all, delete-orphan",
        order_by="Transaction.occurred_at",
    )
