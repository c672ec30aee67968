from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session, Gas as GasModel
from schemas.bottles import GasRead

router = APIRouter()


@router.get("/", response_model=List[GasRead])
async def list_gases(db: AsyncSession = Depends(get_async_session)):
    """List all known gases."""
    result = await db.execute(select(GasModel).order_by(GasModel.code))
    return [GasRead(**g.to_schema) for g in result.scalars().all()]
