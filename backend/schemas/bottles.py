from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class LedgerRow(BaseModel):
    """One transaction as shown in a bottle's ledger."""
    id: UUID
    occurred_at: datetime
    type: str
    gas: Optional[str] = None
    quantity_kg: float
    notes: Optional[str] = None


class BottleState(BaseModel):
    serial: str
    status: str = "active"
    gas: Optional[str] = None
    opening_balance_kg: float
    current_quantity_kg: float
    ledger: List[LedgerRow]


class GasRead(BaseModel):
    code: str
    name: str
