import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from core.balance import QUANTITY_QUANTUM, TRANSACTION_TYPES


def _check_type(v: str) -> str:
    v = (v or "").strip()
    if v not in TRANSACTION_TYPES:
        raise ValueError(f"transaction_type must be one of: {', '.join(sorted(TRANSACTION_TYPES))}")
    return v


def _check_quantity(v: float) -> float:
    # Caller sends the magnitude; the sign comes from the transaction type.
    if not math.isfinite(v) or v <= 0:
        raise ValueError("quantity_kg must be a positive number")
    # Must stay positive once rounded to the stored scale
    rounded = Decimal(str(v)).quantize(QUANTITY_QUANTUM, rounding=ROUND_HALF_UP)
    if rounded <= 0:
        raise ValueError(f"quantity_kg must be at least {QUANTITY_QUANTUM}")
    return float(rounded)


class TransactionCreate(BaseModel):
    serial: str
    gas_code: str
    transaction_type: str
    quantity_kg: float
    notes: Optional[str] = None

    @field_validator("serial", "gas_code")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("transaction_type")
    @classmethod
    def _transaction_type(cls, v: str) -> str:
        return _check_type(v)

    @field_validator("quantity_kg")
    @classmethod
    def _quantity_positive(cls, v: float) -> float:
        return _check_quantity(v)


class TransactionUpdate(BaseModel):
    transaction_type: Optional[str] = None
    quantity_kg: Optional[float] = None
    gas_code: Optional[str] = None
    notes: Optional[str] = None
    occurred_at: Optional[datetime] = None

    @field_validator("transaction_type")
    @classmethod
    def _transaction_type_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return _check_type(v)

    @field_validator("quantity_kg")
    @classmethod
    def _quantity_optional(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        return _check_quantity(v)

    @field_validator("gas_code")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        # A blank gas code leaves the current association untouched
        if v is None:
            return None
        v = v.strip()
        return v or None


class TransactionRead(BaseModel):
    id: UUID
    serial: Optional[str] = None
    gas_code: Optional[str] = None
    transaction_type: str
    quantity_kg: float
    notes: Optional[str] = None
    occurred_at: datetime
