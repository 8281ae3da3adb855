import uuid
from datetime import datetime
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.core.pagination import PaginationParams, get_pagination
from moneyview.dependencies import get_business_tz, get_current_user, get_db
from moneyview.ledger import service
from moneyview.ledger.models import TransactionType
from moneyview.ledger.schemas import (
    TransactionCreate,
    TransactionFilter,
    TransactionResponse,
)

router = APIRouter()


@router.get("")
async def list_transactions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    pagination: Annotated[PaginationParams, Depends(get_pagination)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    customer_id: uuid.UUID | None = Query(None),
    type: TransactionType | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
) -> dict:
    filters = TransactionFilter(
        customer_id=customer_id, type=type, date_from=date_from, date_to=date_to,
    )
    transactions, meta = await service.list_transactions(
        db, current_user.id, filters, pagination, tz
    )
    return {
        "data": [TransactionResponse.model_validate(t) for t in transactions],
        "meta": meta,
    }


@router.post("", status_code=201)
async def create_transaction(
    data: TransactionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
) -> dict:
    transaction = await service.add_transaction(db, data, current_user, tz)
    return {"data": TransactionResponse.model_validate(transaction)}


@router.get("/recent")
async def recent_transactions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    limit: int = Query(10, ge=1, le=100),
) -> dict:
    transactions = await service.get_recent_transactions(db, current_user.id, limit)
    return {"data": [TransactionResponse.model_validate(t) for t in transactions]}


@router.get("/today")
async def today_transactions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
) -> dict:
    transactions = await service.get_today_transactions(db, current_user.id, tz)
    return {"data": [TransactionResponse.model_validate(t) for t in transactions]}


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    transaction = await service.get_transaction(db, transaction_id, current_user.id)
    return {"data": TransactionResponse.model_validate(transaction)}


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    await service.delete_transaction(db, transaction_id, current_user.id)
    return {"data": {"message": "Transaction deleted"}}
