import uuid
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.business.service import get_business_profile
from moneyview.config import Settings
from moneyview.core.pagination import PaginationParams, get_pagination
from moneyview.customers import service
from moneyview.customers.models import CustomerStatus
from moneyview.customers.schemas import (
    BalanceFilter,
    CustomerCreate,
    CustomerFilter,
    CustomerResponse,
    CustomerUpdate,
)
from moneyview.dependencies import get_business_tz, get_current_user, get_db, get_settings
from moneyview.ledger import service as ledger_service
from moneyview.ledger.schemas import TransactionResponse
from moneyview.reports.export import ledger_to_csv
from moneyview.reports.pdf import generate_ledger_pdf

router = APIRouter()


@router.get("")
async def list_customers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    pagination: Annotated[PaginationParams, Depends(get_pagination)],
    search: str | None = Query(None),
    status: CustomerStatus | None = Query(None),
    balance: BalanceFilter | None = Query(None),
) -> dict:
    filters = CustomerFilter(search=search, status=status, balance=balance)
    customers, meta = await service.list_customers(db, current_user.id, filters, pagination)
    return {"data": [CustomerResponse.model_validate(c) for c in customers], "meta": meta}


@router.post("", status_code=201)
async def create_customer(
    data: CustomerCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
) -> dict:
    customer = await service.create_customer(db, data, current_user, tz)
    return {"data": CustomerResponse.model_validate(customer)}


@router.get("/stats")
async def customer_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    stats = await service.get_customer_stats(db, current_user.id)
    return {"data": stats}


@router.get("/due")
async def due_customers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    customers = await service.get_due_customers(db, current_user.id)
    return {"data": [CustomerResponse.model_validate(c) for c in customers]}


@router.get("/{customer_id}")
async def get_customer(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    customer = await service.get_customer(db, customer_id, current_user.id)
    return {"data": CustomerResponse.model_validate(customer)}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: uuid.UUID,
    data: CustomerUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    customer = await service.update_customer(db, customer_id, data, current_user.id)
    return {"data": CustomerResponse.model_validate(customer)}


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    await service.delete_customer(db, customer_id, current_user.id)
    return {"data": {"message": "Customer deleted"}}


@router.get("/{customer_id}/transactions")
async def customer_transactions(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    transactions = await ledger_service.list_customer_transactions(
        db, customer_id, current_user.id
    )
    return {"data": [TransactionResponse.model_validate(t) for t in transactions]}


@router.get("/{customer_id}/ledger")
async def customer_ledger(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    entries = await ledger_service.get_ledger(db, customer_id, current_user.id)
    return {"data": entries}


@router.get("/{customer_id}/ledger/pdf")
async def customer_ledger_pdf(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    customer = await service.get_customer(db, customer_id, current_user.id)
    entries = await ledger_service.get_ledger(db, customer_id, current_user.id)
    profile = await get_business_profile(db, current_user.id)
    pdf_bytes = generate_ledger_pdf(customer, entries, profile, settings)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="ledger-{customer_id}.pdf"'},
    )


@router.get("/{customer_id}/ledger/csv")
async def customer_ledger_csv(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
) -> Response:
    entries = await ledger_service.get_ledger(db, customer_id, current_user.id)
    return Response(
        content=ledger_to_csv(entries, tz),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="ledger-{customer_id}.csv"'},
    )


@router.post("/{customer_id}/reconcile")
async def reconcile_customer(
    customer_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    result = await ledger_service.reconcile_customer_balance(db, customer_id, current_user.id)
    return {"data": result}
