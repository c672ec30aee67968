"""
Bottle balance and gas inference.

Transactions are expected in ascending `occurred_at` order and need to expose
`id`, `occurred_at`, `transaction_type`, `quantity_kg`, `notes` and `gas_code`
(the ORM `Transaction` model does).
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from schemas.bottles import BottleState, LedgerRow


INFLOW_TYPES = frozenset({"fill", "recover", "transfer_in"})
OUTFLOW_TYPES = frozenset({"charge", "transfer_out", "return", "reversal"})
TRANSACTION_TYPES = INFLOW_TYPES | OUTFLOW_TYPES

BOTTLE_STATUS = "active"

# Scale of the quantity_kg columns
QUANTITY_QUANTUM = Decimal("0.001")


def as_decimal(value) -> Decimal:
    """Lenient numeric coercion: None, non-numeric and non-finite values read as 0."""
    if value is None:
        return Decimal(0)
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(0)
    if not d.is_finite():
        return Decimal(0)
    return d


def signed_quantity(transaction_type: str, magnitude) -> Decimal:
    """Apply the direction class of `transaction_type` to a quantity."""
    qty = abs(as_decimal(magnitude))
    return qty if transaction_type in INFLOW_TYPES else -qty


def infer_gas_code(transactions: Sequence) -> Optional[str]:
    # First positive inflow decides when it carries a gas; otherwise fall back to the latest row.
    inflow = next(
        (t for t in transactions if t.transaction_type in INFLOW_TYPES and as_decimal(t.quantity_kg) > 0),
        None,
    )
    if inflow is not None and inflow.gas_code:
        return inflow.gas_code
    if transactions:
        return transactions[-1].gas_code
    return None


def compute_bottle_state(
    serial: str,
    opening_balance,
    transactions: Sequence,
    direct_gas_code: Optional[str] = None,
) -> BottleState:
    opening = as_decimal(opening_balance)

    current = opening
    for t in transactions:
        current += as_decimal(t.quantity_kg)

    gas_code = direct_gas_code if direct_gas_code else infer_gas_code(transactions)

    ledger = [
        LedgerRow(
            id=t.id,
            occurred_at=t.occurred_at,
            type=t.transaction_type,
            gas=t.gas_code or gas_code,
            quantity_kg=float(as_decimal(t.quantity_kg)),
            notes=t.notes,
        )
        for t in transactions
    ]

    return BottleState(
        serial=serial,
        status=BOTTLE_STATUS,
        gas=gas_code,
        opening_balance_kg=float(opening),
        current_quantity_kg=float(current),
        ledger=ledger,
    )
