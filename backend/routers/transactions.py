import uuid
from datetime import datetime, timezone
from typing import Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.balance import TRANSACTION_TYPES, as_decimal, signed_quantity
from core.converters import transaction_to_schema
from db.database import (
    get_async_session,
    Bottle as BottleModel,
    Gas as GasModel,
    Transaction as TransactionModel,
)
from schemas.transactions import TransactionCreate, TransactionRead, TransactionUpdate

router = APIRouter()


async def _ensure_gas(db: AsyncSession, code: str) -> GasModel:
    """Get the gas by code, creating it (name = code) when unseen."""
    res = await db.execute(select(GasModel).where(GasModel.code == code))
    gas = res.scalar_one_or_none()
    if gas:
        return gas
    gas = GasModel(code=code, name=code)
    db.add(gas)
    await db.flush()
    return gas


async def _ensure_bottle(db: AsyncSession, serial: str, gas_code: str) -> BottleModel:
    """Get the bottle by serial and align its gas, creating it when unseen."""
    res = await db.execute(select(BottleModel).where(BottleModel.serial == serial))
    bottle = res.scalar_one_or_none()
    if bottle:
        bottle.gas_code = gas_code
        return bottle
    bottle = BottleModel(id=uuid.uuid4(), serial=serial, gas_code=gas_code, opening_balance_kg=0)
    db.add(bottle)
    await db.flush()
    return bottle


async def _get_transaction_with_serial(db: AsyncSession, transaction_id: UUID):
    try:
        res = await db.execute(
            select(TransactionModel, BottleModel.serial)
            .join(BottleModel, TransactionModel.bottle_id == BottleModel.id)
            .where(TransactionModel.id == transaction_id)
        )
        row = res.first()
    except Exception as e:
        logger.exception(f"Error loading transaction {transaction_id}: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to load transaction: {e}")
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return row[0], row[1]


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Record a transaction against a bottle.

    - Unknown gas codes and bottle serials are created on the fly.
    - An existing bottle is re-aligned to the transaction's gas.
    - quantity_kg is a magnitude; the stored sign follows the transaction type.
    """
    try:
        gas = await _ensure_gas(db, payload.gas_code)
        bottle = await _ensure_bottle(db, payload.serial, gas.code)

        tx = TransactionModel(
            id=uuid.uuid4(),
            bottle_id=bottle.id,
            gas_code=gas.code,
            transaction_type=payload.transaction_type,
            quantity_kg=signed_quantity(payload.transaction_type, payload.quantity_kg),
            notes=payload.notes,
            occurred_at=datetime.now(timezone.utc),
        )
        db.add(tx)
        await db.commit()

        logger.info(
            f"Recorded {tx.transaction_type} of {tx.quantity_kg} kg {gas.code} on bottle {bottle.serial}"
        )
        return {"ok": True, "transaction": transaction_to_schema(tx, bottle.serial)}
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception(f"create_transaction failed: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to create transaction: {e}")


@router.get("/", response_model=List[TransactionRead])
async def list_transactions(db: AsyncSession = Depends(get_async_session)):
    """All transactions, newest first."""
    try:
        res = await db.execute(
            select(TransactionModel, BottleModel.serial)
            .join(BottleModel, TransactionModel.bottle_id == BottleModel.id)
            .order_by(TransactionModel.occurred_at.desc())
        )
        return [transaction_to_schema(tx, serial) for tx, serial in res.all()]
    except Exception as e:
        logger.exception(f"list_transactions failed: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to list transactions: {e}")


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction(transaction_id: UUID, db: AsyncSession = Depends(get_async_session)):
    tx, serial = await _get_transaction_with_serial(db, transaction_id)
    return transaction_to_schema(tx, serial)


@router.patch("/{transaction_id}", response_model=Dict)
async def update_transaction(
    transaction_id: UUID,
    payload: TransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Edit a transaction. Fields left out keep their stored values.

    The stored sign is re-applied from the (possibly new) type, so changing a
    charge into a fill flips the quantity positive.
    """
    tx, serial = await _get_transaction_with_serial(db, transaction_id)

    next_type = payload.transaction_type or tx.transaction_type
    if next_type not in TRANSACTION_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid transaction_type")

    if payload.quantity_kg is not None:
        magnitude = as_decimal(payload.quantity_kg)
    else:
        magnitude = abs(as_decimal(tx.quantity_kg))
    if magnitude <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="quantity_kg must be positive")

    try:
        tx.transaction_type = next_type
        tx.quantity_kg = signed_quantity(next_type, magnitude)

        if payload.gas_code:
            gas = await _ensure_gas(db, payload.gas_code)
            # Keep the bottle aligned with the transaction gas
            bottle = await db.get(BottleModel, tx.bottle_id)
            bottle.gas_code = gas.code
            tx.gas_code = gas.code

        if payload.notes is not None:
            tx.notes = payload.notes
        if payload.occurred_at is not None:
            tx.occurred_at = payload.occurred_at

        await db.commit()

        logger.info(f"Updated transaction {tx.id} on bottle {serial}")
        return {"ok": True, "updated": transaction_to_schema(tx, serial)}
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        logger.exception(f"update_transaction failed: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to update transaction: {e}")


@router.delete("/{transaction_id}", response_model=Dict)
async def delete_transaction(transaction_id: UUID, db: AsyncSession = Depends(get_async_session)):
    """Remove a transaction outright. No compensating entry is written."""
    tx, serial = await _get_transaction_with_serial(db, transaction_id)
    try:
        await db.delete(tx)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"delete_transaction failed: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to delete transaction: {e}")

    logger.info(f"Deleted transaction {transaction_id} from bottle {serial}")
    return {"ok": True, "message": f"Transaction {transaction_id} deleted"}
