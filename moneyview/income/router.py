import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.dependencies import get_current_user, get_db, get_income_cache
from moneyview.income import service
from moneyview.income.cache import IncomeCache
from moneyview.income.schemas import IncomeCreate, IncomeEntryResponse, IncomeUpdate

router = APIRouter()


@router.get("")
async def list_income(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
    year: int = Query(..., ge=1900, le=9999),
) -> dict:
    entries = await service.get_income_by_year(db, year, current_user.id, cache)
    return {"data": entries}


@router.post("", status_code=201)
async def create_income(
    data: IncomeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
) -> dict:
    entry = await service.add_income(db, data, current_user, cache)
    return {"data": IncomeEntryResponse.model_validate(entry)}


@router.get("/stats/monthly")
async def monthly_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
    year: int = Query(..., ge=1900, le=9999),
) -> dict:
    stats = await service.get_monthly_stats(db, year, current_user.id, cache)
    return {"data": stats}


@router.get("/stats/yearly")
async def yearly_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
    year: int = Query(..., ge=1900, le=9999),
) -> dict:
    stats = await service.get_yearly_stats(db, year, current_user.id, cache)
    return {"data": stats}


@router.get("/stats/all-time")
async def all_time_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
) -> dict:
    stats = await service.get_all_time_stats(db, current_user.id, cache)
    return {"data": stats}


@router.put("/{income_id}")
async def update_income(
    income_id: uuid.UUID,
    data: IncomeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
) -> dict:
    entry = await service.update_income(db, income_id, data, current_user.id, cache)
    return {"data": IncomeEntryResponse.model_validate(entry)}


@router.delete("/{income_id}")
async def delete_income(
    income_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
) -> dict:
    await service.delete_income(db, income_id, current_user.id, cache)
    return {"data": {"message": "Income entry deleted"}}
