from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.balance import compute_bottle_state
from db.database import (
    get_async_session,
    Bottle as BottleModel,
    Transaction as TransactionModel,
)
from schemas.bottles import BottleState

router = APIRouter()


async def _load_bottle_state(db: AsyncSession, serial: str) -> BottleState:
    try:
        res = await db.execute(select(BottleModel).where(BottleModel.serial == serial))
        bottle = res.scalar_one_or_none()
        if not bottle:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bottle not found")

        tres = await db.execute(
            select(TransactionModel)
            .where(TransactionModel.bottle_id == bottle.id)
            .order_by(TransactionModel.occurred_at.asc())
        )
        transactions = tres.scalars().all()

        return compute_bottle_state(
            bottle.serial,
            bottle.opening_balance_kg,
            transactions,
            direct_gas_code=bottle.gas_code,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error loading bottle {serial}: {e!r}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to load bottle: {e}")


@router.get("/", response_model=BottleState)
async def get_bottle_by_query(
    serial: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Bottle state for `?serial=...`."""
    serial = (serial or "").strip()
    if not serial:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Serial number is required")
    return await _load_bottle_state(db, serial)


@router.get("/{serial}", response_model=BottleState)
async def get_bottle(serial: str, db: AsyncSession = Depends(get_async_session)):
    """Current quantity, gas and ledger (oldest first) of a bottle."""
    return await _load_bottle_state(db, serial)
