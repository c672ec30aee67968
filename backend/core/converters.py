from typing import Dict, Optional

from core.balance import as_decimal
from db.database import Transaction as TransactionModel


def transaction_to_schema(tx: TransactionModel, serial: Optional[str] = None) -> Dict:
    """Convert a Transaction row to a TransactionRead-shaped dict"""
    return {
        "id": tx.id,
        "serial": serial,
        "gas_code": tx.gas_code,
        "transaction_type": tx.transaction_type,
        "quantity_kg": float(as_decimal(tx.quantity_kg)),
        "notes": tx.notes,
        "occurred_at": tx.occurred_at,
    }
