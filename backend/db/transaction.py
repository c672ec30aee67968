import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Transaction(Base):
    """Signed quantity movement against a bottle.

    quantity_kg is stored positive for inflow types and negative for outflow
    types; the sign is applied when the row is written.
    """
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bottle_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bottles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gas_code = Column(String, ForeignKey("gases.code", ondelete="SET NULL"), nullable=True, index=True)

    transaction_type = Column(Text, nullable=False)  # see core.balance.TRANSACTION_TYPES
    quantity_kg = Column(Numeric(12, 3), nullable=True)
    notes = Column(Text, nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    bottle = relationship("Bottle", back_populates="transactions")
    gas = relationship("Gas", back_populates="transactions")
